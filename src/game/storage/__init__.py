"""Storage module for game sessions."""

from game.storage.session_store import GameSessionStore

__all__ = [
    "GameSessionStore",
]
