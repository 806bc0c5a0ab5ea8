"""CLI interface package for the Twenty Questions game."""

from game.cli.app import GameCLIApp
from game.cli.commands import (
    CommandResult,
    get_statistics,
    get_status,
    handle_play_input,
    play_game,
    show_config,
    start_game,
    watch_game,
)

__all__ = [
    "CommandResult",
    "GameCLIApp",
    "get_statistics",
    "get_status",
    "handle_play_input",
    "play_game",
    "show_config",
    "start_game",
    "watch_game",
]
