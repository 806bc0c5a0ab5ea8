"""Game module for game engine and session management."""

from game.engine import GameEngine
from game.session_runner import GameSessionRunner, GuessResult, HintResult, QuestionResult
from game.autoplay import AutoPlayScheduler
from game.analytics import GameStatistics, compute_statistics
from game.backend import DefaultLLMBackend, LLMBackend
from game.domain import (
    Category,
    Difficulty,
    GameMode,
    GameResult,
    GameSession,
    LLMConfig,
    QuestionEntry,
    Word,
)
from game.storage import GameSessionStore
from game.cli import GameCLIApp

__all__ = [
    "AutoPlayScheduler",
    "Category",
    "DefaultLLMBackend",
    "Difficulty",
    "GameCLIApp",
    "GameEngine",
    "GameMode",
    "GameResult",
    "GameSession",
    "GameSessionRunner",
    "GameSessionStore",
    "GameStatistics",
    "GuessResult",
    "HintResult",
    "LLMBackend",
    "LLMConfig",
    "QuestionEntry",
    "QuestionResult",
    "Word",
    "compute_statistics",
]
