"""Configuration module for the Twenty Questions game."""

from .loader import ConfigLoader
from .models import (
    AgentsConfig,
    AnswererConfig,
    AutoPlayConfig,
    DirectoriesConfig,
    GameConfig,
    GameSettingsConfig,
    JudgeConfig,
    LLMProviderConfig,
    ModelsConfig,
    QuestionerConfig,
    ReadinessConfig,
    WordSelectorConfig,
)

__all__ = [
    "ConfigLoader",
    "AgentsConfig",
    "AnswererConfig",
    "AutoPlayConfig",
    "DirectoriesConfig",
    "GameConfig",
    "GameSettingsConfig",
    "JudgeConfig",
    "LLMProviderConfig",
    "ModelsConfig",
    "QuestionerConfig",
    "ReadinessConfig",
    "WordSelectorConfig",
]
