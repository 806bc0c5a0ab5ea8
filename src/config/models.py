"""Configuration data models using Pydantic."""

from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def resolve_env_vars(value: str) -> str:
    pattern = r'\$\{(\w+)(?::([^}]*))?\}'

    def replacer(match):
        var_name = match.group(1)
        default_value = match.group(2) or ""
        return os.environ.get(var_name, default_value)

    return re.sub(pattern, replacer, value)


class DirectoriesConfig(BaseModel):
    game_storage_dir: str = "game_storage"


class GameSettingsConfig(BaseModel):
    max_questions: int = 20
    final_guess_warning_at: int = 19
    hints_per_word: int = Field(default=3, ge=1)
    default_difficulty: str = "medium"
    default_mode: str = "human-asks"
    persist_sessions: bool = True
    debug_reveal_word: bool = False


class GameConfig(BaseModel):
    directories: DirectoriesConfig = Field(default_factory=DirectoriesConfig)
    game: GameSettingsConfig = Field(default_factory=GameSettingsConfig)


class LLMProviderConfig(BaseModel):
    transport: str = "langchain_openai"
    base_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    model_name: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 256
    timeout: float = 60.0
    requires_api_key: bool = True

    @field_validator("base_url", "api_key", mode="before")
    @classmethod
    def resolve_env(cls, v: Any) -> str:
        if isinstance(v, str):
            return resolve_env_vars(v)
        return v

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) or not self.requires_api_key


def _default_providers() -> Dict[str, LLMProviderConfig]:
    return {
        "openai": LLMProviderConfig(
            transport="langchain_openai",
            base_url="${OPENAI_BASE_URL:https://api.openai.com/v1}",
            api_key="${OPENAI_API_KEY:}",
            model_name="gpt-4o",
        ),
        "gemini": LLMProviderConfig(
            transport="http",
            base_url="https://generativelanguage.googleapis.com/v1beta/openai",
            api_key="${GEMINI_API_KEY:}",
            model_name="gemini-2.0-flash-lite",
        ),
        "ollama": LLMProviderConfig(
            transport="langchain_ollama",
            base_url="${OLLAMA_BASE_URL:http://localhost:11434}",
            model_name="qwen2.5:7b",
            requires_api_key=False,
        ),
    }


class ModelsConfig(BaseModel):
    default_questioner: str = "openai"
    default_answerer: str = "openai"
    providers: Dict[str, LLMProviderConfig] = Field(default_factory=_default_providers)

    def get_provider_config(self, name: str) -> LLMProviderConfig:
        if name not in self.providers:
            raise ValueError(f"Unknown LLM provider: {name}")
        return self.providers[name]


class AnswererConfig(BaseModel):
    max_answer_words: int = 10
    temperature: float = 0.5


class QuestionerConfig(BaseModel):
    fallback_questions: List[str] = Field(
        default_factory=lambda: [
            "Is it a living thing?",
            "Is it an animal?",
            "Is it bigger than a breadbox?",
            "Can you eat it?",
            "Is it found indoors?",
            "Is it man-made?",
            "Is it a place?",
            "Can you hold it in your hand?",
            "Is it used every day?",
            "Is it a person?",
            "Does it use electricity?",
            "Is it found in nature?",
        ]
    )
    catch_all_question: str = "Is it something most people have seen before?"
    forbidden_patterns: List[str] = Field(
        default_factory=lambda: [
            r"\bletters?\b",
            r"\bspell(ed|ing|s)?\b",
            r"\bsyllables?\b",
            r"\bvowels?\b",
            r"\bconsonants?\b",
            r"\brhymes?\b",
            r"\b(start|begin|end)s? with\b",
            r"\bhow (long|many characters)\b",
            r"\bcharacters? (long|in (the|its) name)\b",
            r"\b(word|name) (length|long)\b",
        ]
    )


class ReadinessConfig(BaseModel):
    enabled: bool = True
    min_questions: int = 4
    every: int = 2


class JudgeConfig(BaseModel):
    include_explanation: bool = False


class WordSelectorConfig(BaseModel):
    temperature: float = 0.9
    avoid_recent_words: int = 10


class AutoPlayConfig(BaseModel):
    turn_delay_seconds: float = 3.0
    speeds: Dict[str, float] = Field(
        default_factory=lambda: {"normal": 3.0, "fast": 2.0, "very_fast": 1.0}
    )


class AgentsConfig(BaseModel):
    answerer: AnswererConfig = Field(default_factory=AnswererConfig)
    questioner: QuestionerConfig = Field(default_factory=QuestionerConfig)
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)
    judge: JudgeConfig = Field(default_factory=JudgeConfig)
    word_selector: WordSelectorConfig = Field(default_factory=WordSelectorConfig)
    autoplay: AutoPlayConfig = Field(default_factory=AutoPlayConfig)

    def autoplay_delay(self, speed: Optional[str] = None) -> float:
        if speed is None:
            return self.autoplay.turn_delay_seconds
        if speed not in self.autoplay.speeds:
            raise ValueError(f"Unknown auto-play speed: {speed}")
        return self.autoplay.speeds[speed]
