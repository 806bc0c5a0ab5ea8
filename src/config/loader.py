"""Configuration loader for the game's YAML files.

``game.yaml``, ``models.yaml`` and ``agents.yaml`` are read from one
config directory: the one passed in, else ``$TWENTY_QUESTIONS_CONFIG_DIR``,
else the repository's ``config/``. A missing file is not an error; the
pydantic defaults apply.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel

from .models import AgentsConfig, GameConfig, ModelsConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "TWENTY_QUESTIONS_CONFIG_DIR"

C = TypeVar("C", bound=BaseModel)


def default_config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).parent.parent.parent / "config"


class ConfigLoader:
    def __init__(self, config_dir: Optional[str | Path] = None):
        self._config_dir = Path(config_dir) if config_dir is not None else default_config_dir()
        self._cache: Dict[str, BaseModel] = {}

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def _read_yaml(self, filename: str) -> dict:
        filepath = self._config_dir / filename
        if not filepath.exists():
            logger.warning("Config file not found: %s, using defaults", filepath)
            return {}

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error("Invalid YAML in %s: %s", filepath, e)
            raise

        if data is not None and not isinstance(data, dict):
            raise ValueError(f"{filepath} must contain a mapping at the top level")
        return data or {}

    def _load(self, filename: str, config_cls: Type[C], force_reload: bool) -> C:
        if not force_reload and filename in self._cache:
            return self._cache[filename]

        config = config_cls(**self._read_yaml(filename))
        self._cache[filename] = config
        logger.info("Loaded %s from %s", config_cls.__name__, self._config_dir / filename)
        return config

    def load_game_config(self, force_reload: bool = False) -> GameConfig:
        return self._load("game.yaml", GameConfig, force_reload)

    def load_models_config(self, force_reload: bool = False) -> ModelsConfig:
        return self._load("models.yaml", ModelsConfig, force_reload)

    def load_agents_config(self, force_reload: bool = False) -> AgentsConfig:
        return self._load("agents.yaml", AgentsConfig, force_reload)

    def load_all(self, force_reload: bool = False) -> tuple[GameConfig, ModelsConfig, AgentsConfig]:
        return (
            self.load_game_config(force_reload),
            self.load_models_config(force_reload),
            self.load_agents_config(force_reload),
        )
