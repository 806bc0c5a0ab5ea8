"""CLI Application for the Twenty Questions game.

This module provides the main CLI application that wraps the GameEngine
and exposes the views the commands need: session status, statistics and
the effective configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from game.engine import GameEngine

logger = logging.getLogger(__name__)


class GameCLIApp:
    def __init__(
        self,
        config_dir: Optional[Path] = None,
        base_dir: Optional[Path] = None,
        debug: Optional[bool] = None,
        engine: Optional[GameEngine] = None,
    ):
        self._engine = engine or GameEngine(config_dir=config_dir, base_dir=base_dir, debug=debug)

    @property
    def engine(self) -> GameEngine:
        return self._engine

    def get_session_status(self, session_id: Optional[str] = None) -> Dict[str, Any]:
        session = self._engine.get_session(session_id)
        status = {
            "session_id": session.session_id,
            "mode": session.mode.value,
            "category": session.category.value,
            "difficulty": session.difficulty.value,
            "question_count": session.question_count,
            "max_questions": session.max_questions,
            "hints_issued": session.hints_issued,
            "total_hints": session.total_hints,
            "paused": session.paused,
            "active": session.active,
            "elapsed_seconds": round(session.elapsed_seconds(), 1),
            "result": session.result.value if session.result else None,
        }
        if self._engine.debug or not session.active:
            status["word"] = session.word.text
        return status

    def get_config_summary(self) -> Dict[str, Any]:
        game = self._engine.game_config.game
        models = self._engine.models_config
        registry = self._engine.model_registry

        return {
            "config_dir": str(self._engine.config_dir),
            "max_questions": game.max_questions,
            "hints_per_word": game.hints_per_word,
            "default_mode": game.default_mode,
            "default_difficulty": game.default_difficulty,
            "persist_sessions": game.persist_sessions,
            "default_questioner": models.default_questioner,
            "default_answerer": models.default_answerer,
            "providers": {
                name: {
                    "transport": cfg.transport,
                    "model": cfg.model_name,
                    "configured": registry.is_configured(name),
                }
                for name, cfg in models.providers.items()
            },
            "autoplay_speeds": dict(self._engine.agents_config.autoplay.speeds),
        }

    async def close(self) -> None:
        await self._engine.close()
        logger.info("GameCLIApp closed")
