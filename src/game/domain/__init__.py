"""Domain models for the game system."""

from game.domain.entities import (
    Category,
    Difficulty,
    GameMode,
    GameResult,
    GameSession,
    LLMConfig,
    QuestionEntry,
    Word,
)

__all__ = [
    "Category",
    "Difficulty",
    "GameMode",
    "GameResult",
    "GameSession",
    "LLMConfig",
    "QuestionEntry",
    "Word",
]
