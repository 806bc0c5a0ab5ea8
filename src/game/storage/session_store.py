"""Storage layer for game sessions."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from config import ConfigLoader, GameConfig
from game.domain.entities import GameMode, GameResult, GameSession, LLMConfig, Word
from game.errors import SessionNotFound

logger = logging.getLogger(__name__)


class GameSessionStore:
    """Owns every ``GameSession``, keyed by session id.

    Sessions live in memory. With ``persist`` enabled each one is also
    written to ``<game_storage_dir>/sessions/<id>.json`` on every change
    and reloaded when the store is created.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        base_dir: Optional[Path] = None,
        persist: Optional[bool] = None,
    ):
        if config is None:
            loader = ConfigLoader()
            config = loader.load_game_config()

        self._config = config
        self._persist = config.game.persist_sessions if persist is None else persist
        self._sessions: Dict[str, GameSession] = {}

        if base_dir is None:
            base_dir = Path(__file__).parent.parent.parent.parent

        self._game_storage_dir = base_dir / config.directories.game_storage_dir
        self._sessions_dir = self._game_storage_dir / "sessions"

        if self._persist:
            self._ensure_directories()
            self._load_all()

    def _ensure_directories(self) -> None:
        self._sessions_dir.mkdir(parents=True, exist_ok=True)

    @property
    def storage_dir(self) -> Path:
        return self._game_storage_dir

    @property
    def persistent(self) -> bool:
        return self._persist

    def _session_file(self, session_id: str) -> Path:
        return self._sessions_dir / f"{session_id}.json"

    def _load_all(self) -> None:
        for session_file in self._sessions_dir.glob("*.json"):
            try:
                session = self._read_session_file(session_file)
            except (OSError, ValueError, ValidationError) as exc:
                logger.error("Failed to load session %s: %s", session_file.stem, exc)
                continue
            self._sessions[session.session_id] = session

        if self._sessions:
            logger.info("Loaded %d stored sessions", len(self._sessions))

    def _read_session_file(self, session_file: Path) -> GameSession:
        with open(session_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        return GameSession.model_validate(data)

    def _save(self, session: GameSession) -> None:
        if not self._persist:
            return

        session_data = session.model_dump(mode="json")
        with open(self._session_file(session.session_id), "w", encoding="utf-8") as f:
            json.dump(session_data, f, ensure_ascii=False, indent=2)

        logger.debug("Saved session %s", session.session_id)

    def create(
        self,
        word: Word,
        mode: GameMode = GameMode.HUMAN_ASKS,
        llm_config: Optional[LLMConfig] = None,
        max_questions: Optional[int] = None,
    ) -> GameSession:
        session = GameSession(
            word=word,
            mode=mode,
            llm_config=llm_config or LLMConfig(),
            max_questions=max_questions or self._config.game.max_questions,
        )
        self._sessions[session.session_id] = session
        self._save(session)

        logger.info(
            "Created session %s (mode=%s, category=%s, difficulty=%s)",
            session.session_id,
            mode.value,
            word.category.value,
            word.difficulty.value,
        )
        return session

    def get(self, session_id: str) -> Optional[GameSession]:
        return self._sessions.get(session_id)

    def load(self, session_id: str) -> GameSession:
        session = self.get(session_id)
        if session is None:
            raise SessionNotFound(f"Session not found: {session_id}")
        return session

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def update(self, session: GameSession) -> None:
        if session.session_id not in self._sessions:
            raise SessionNotFound(f"Session not found: {session.session_id}")
        self._sessions[session.session_id] = session
        self._save(session)

    def finish(
        self,
        session_id: str,
        result: GameResult,
        final_guess: Optional[str] = None,
    ) -> GameSession:
        session = self.load(session_id)
        session.finish(result, final_guess=final_guess)
        self._save(session)
        logger.info("Session %s ended: %s", session_id, result.value)
        return session

    def end(self, session_id: str, won: bool, final_guess: Optional[str] = None) -> GameSession:
        result = GameResult.WIN if won else GameResult.LOSE
        return self.finish(session_id, result, final_guess=final_guess)

    def delete(self, session_id: str) -> bool:
        deleted = self._sessions.pop(session_id, None) is not None

        if self._persist:
            session_file = self._session_file(session_id)
            if session_file.exists():
                session_file.unlink()
                deleted = True

        if deleted:
            logger.info("Deleted session %s", session_id)
        return deleted

    def list_sessions(
        self,
        active: Optional[bool] = None,
        mode: Optional[GameMode] = None,
    ) -> List[GameSession]:
        sessions = []
        for session in self._sessions.values():
            if active is not None and session.active != active:
                continue
            if mode is not None and session.mode != mode:
                continue
            sessions.append(session)

        return sorted(sessions, key=lambda s: s.created_at)

    def recent_words(self, limit: int) -> List[str]:
        if limit <= 0:
            return []
        newest_first = self.list_sessions()[::-1]
        return [s.word.text for s in newest_first[:limit]]
