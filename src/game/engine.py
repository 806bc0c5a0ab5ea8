"""Game Engine for managing game lifecycle and resources."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Type, TypeVar, Union

from config import AgentsConfig, ConfigLoader, GameConfig, ModelsConfig
from game.analytics import compute_statistics
from game.autoplay import AutoPlayScheduler, TurnCallback
from game.backend import DefaultLLMBackend, LLMBackend
from game.domain.entities import Category, Difficulty, GameMode, GameSession, LLMConfig
from game.errors import InputValidationError, NoActiveSession, SessionNotFound
from game.schemas import (
    AskQuestionResponse,
    GuessResponse,
    HintResponse,
    LLMAnswerResponse,
    LLMGuessResponse,
    LLMQuestionResponse,
    PauseResponse,
    SessionMeta,
    StartGameResponse,
    StatisticsResponse,
    StopResponse,
)
from game.session_runner import GameSessionRunner, TurnResult
from game.storage.session_store import GameSessionStore
from models import ModelProviderRegistry

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _parse_enum(enum_cls: Type[E], value: Union[E, str, None], field: str) -> Optional[E]:
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InputValidationError(f"Invalid {field} '{value}', expected one of: {allowed}") from exc


class GameEngine:
    """Entry point for every game operation.

    Sessions are addressed by id. Operations called without a
    ``session_id`` act on the engine's current session, which is the one
    most recently started and still running.
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        base_dir: Optional[Path] = None,
        backend: Optional[LLMBackend] = None,
        debug: Optional[bool] = None,
        persist: Optional[bool] = None,
    ):
        self._config_loader = ConfigLoader(config_dir)
        self._game_config: GameConfig = self._config_loader.load_game_config()
        self._models_config: ModelsConfig = self._config_loader.load_models_config()
        self._agents_config: AgentsConfig = self._config_loader.load_agents_config()

        if base_dir is None:
            base_dir = Path(__file__).parent.parent.parent

        self._base_dir = base_dir
        self._debug = self._game_config.game.debug_reveal_word if debug is None else debug
        self._model_registry = ModelProviderRegistry(self._models_config)
        self._backend = backend or DefaultLLMBackend(
            self._model_registry,
            self._agents_config,
            hints_per_word=self._game_config.game.hints_per_word,
        )
        self._session_store = GameSessionStore(
            config=self._game_config,
            base_dir=base_dir,
            persist=persist,
        )

        self._runners: Dict[str, GameSessionRunner] = {}
        self._schedulers: Dict[str, AutoPlayScheduler] = {}
        self._current_session_id: Optional[str] = None

        if backend is None:
            self._warn_missing_credentials()
        logger.info("GameEngine initialized with base_dir=%s", base_dir)

    def _warn_missing_credentials(self) -> None:
        if not self._model_registry.has_any_backend():
            logger.warning(
                "No LLM credentials configured; every role will use its fallback behavior"
            )
            return

        roles = {
            "questioner": self._models_config.default_questioner,
            "answerer": self._models_config.default_answerer,
        }
        for role, provider in roles.items():
            if not self._model_registry.is_configured(provider):
                logger.warning(
                    "Default %s provider '%s' has no credentials; it will use fallbacks",
                    role,
                    provider,
                )

    @property
    def config_dir(self) -> Path:
        return self._config_loader.config_dir

    @property
    def game_config(self) -> GameConfig:
        return self._game_config

    @property
    def models_config(self) -> ModelsConfig:
        return self._models_config

    @property
    def agents_config(self) -> AgentsConfig:
        return self._agents_config

    @property
    def model_registry(self) -> ModelProviderRegistry:
        return self._model_registry

    @property
    def session_store(self) -> GameSessionStore:
        return self._session_store

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def current_session_id(self) -> Optional[str]:
        return self._current_session_id

    def default_llm_config(self) -> LLMConfig:
        return LLMConfig(
            questioner=self._models_config.default_questioner,
            answerer=self._models_config.default_answerer,
        )

    def get_runner(self, session_id: Optional[str] = None) -> GameSessionRunner:
        session_id = session_id or self._current_session_id
        if session_id is None:
            raise NoActiveSession("No active game session")

        runner = self._runners.get(session_id)
        if runner is None:
            session = self._session_store.get(session_id)
            if session is None:
                raise SessionNotFound(f"Session not found: {session_id}")
            runner = self._make_runner(session)
        return runner

    def get_session(self, session_id: Optional[str] = None) -> GameSession:
        return self.get_runner(session_id).session

    def list_sessions(
        self,
        active: Optional[bool] = None,
        mode: Optional[GameMode] = None,
    ) -> List[GameSession]:
        return self._session_store.list_sessions(active=active, mode=mode)

    def _make_runner(self, session: GameSession) -> GameSessionRunner:
        runner = GameSessionRunner(
            session=session,
            session_store=self._session_store,
            backend=self._backend,
            agents_config=self._agents_config,
            final_guess_warning_at=self._game_config.game.final_guess_warning_at,
        )
        self._runners[session.session_id] = runner
        return runner

    def _after_turn(self, runner: GameSessionRunner) -> None:
        if runner.is_active:
            return
        scheduler = self._schedulers.pop(runner.session_id, None)
        if scheduler is not None:
            scheduler.cancel()
        if self._current_session_id == runner.session_id:
            self._current_session_id = None

    async def start_game(
        self,
        mode: Union[GameMode, str, None] = None,
        difficulty: Union[Difficulty, str, None] = None,
        category: Union[Category, str, None] = None,
        llm_config: Optional[LLMConfig] = None,
        make_current: bool = True,
    ) -> StartGameResponse:
        """Select a word and open a new session.

        With ``make_current`` the new session replaces the current one, and
        a replaced session that is still running is abandoned. Otherwise
        the session runs alongside it and must be addressed by id.
        """
        settings = self._game_config.game
        mode = _parse_enum(GameMode, mode, "mode") or GameMode(settings.default_mode)
        difficulty = _parse_enum(Difficulty, difficulty, "difficulty") or Difficulty(
            settings.default_difficulty
        )
        category = _parse_enum(Category, category, "category")
        llm_config = llm_config or self.default_llm_config()

        if make_current:
            self._abandon_current()

        avoid = self._session_store.recent_words(self._agents_config.word_selector.avoid_recent_words)
        word = await self._backend.select_word(category, difficulty, llm_config, avoid)

        session = self._session_store.create(
            word=word,
            mode=mode,
            llm_config=llm_config,
            max_questions=settings.max_questions,
        )
        self._make_runner(session)
        if make_current:
            self._current_session_id = session.session_id
        logger.debug("Secret word for session %s: %s", session.session_id, word.text)

        response = StartGameResponse(session=SessionMeta.from_session(session))
        if self._debug:
            response.word = word.text
            response.hints = list(word.hints)
        return response

    def _abandon_current(self) -> None:
        if self._current_session_id is None:
            return
        runner = self._runners.get(self._current_session_id)
        if runner is not None:
            self.stop_autoplay(runner.session_id)
            if runner.is_active:
                logger.info("Abandoning session %s for a new game", runner.session_id)
                runner.abandon()
        self._current_session_id = None

    async def ask_question(
        self,
        question: str,
        session_id: Optional[str] = None,
    ) -> AskQuestionResponse:
        runner = self.get_runner(session_id)
        result = await runner.ask(question)
        return AskQuestionResponse(
            question_text=result.question,
            answer_text=result.answer,
            question_count=result.question_count,
            final_guess_mode=result.final_guess_mode,
        )

    def request_hint(self, session_id: Optional[str] = None) -> HintResponse:
        result = self.get_runner(session_id).hint()
        return HintResponse(
            hint_text=result.hint,
            hints_issued=result.hints_issued,
            total_hints=result.total_hints,
        )

    async def make_guess(self, guess: str, session_id: Optional[str] = None) -> GuessResponse:
        runner = self.get_runner(session_id)
        result = await runner.guess(guess)
        self._after_turn(runner)
        return GuessResponse(
            correct=result.correct,
            feedback_text=result.feedback,
            revealed_word=result.revealed_word,
        )

    async def llm_question_turn(
        self,
        llm_config: Optional[LLMConfig] = None,
        session_id: Optional[str] = None,
    ) -> LLMQuestionResponse:
        runner = self.get_runner(session_id)
        question = await runner.generate_llm_question(llm_config)
        return LLMQuestionResponse(question_text=question, question_count=runner.question_count)

    async def llm_answer_turn(
        self,
        question: str,
        llm_config: Optional[LLMConfig] = None,
        session_id: Optional[str] = None,
    ) -> LLMAnswerResponse:
        runner = self.get_runner(session_id)
        result = await runner.answer_llm_question(question, llm_config)
        return LLMAnswerResponse(
            question_text=result.question,
            answer_text=result.answer,
            question_count=result.question_count,
            counted=result.counted,
        )

    async def llm_guess_turn(
        self,
        llm_config: Optional[LLMConfig] = None,
        session_id: Optional[str] = None,
    ) -> LLMGuessResponse:
        runner = self.get_runner(session_id)
        result = await runner.llm_guess_turn(llm_config)
        self._after_turn(runner)
        return LLMGuessResponse(
            guess_text=result.guess,
            correct=result.correct,
            feedback_text=result.feedback,
            revealed_word=result.revealed_word,
        )

    async def play_llm_turn(
        self,
        llm_config: Optional[LLMConfig] = None,
        session_id: Optional[str] = None,
    ) -> TurnResult:
        runner = self.get_runner(session_id)
        result = await runner.llm_question_turn(llm_config)
        self._after_turn(runner)
        return result

    def start_autoplay(
        self,
        session_id: Optional[str] = None,
        speed: Optional[str] = None,
        on_turn: Optional[TurnCallback] = None,
        llm_config: Optional[LLMConfig] = None,
    ) -> AutoPlayScheduler:
        runner = self.get_runner(session_id)
        delay = self._agents_config.autoplay_delay(speed)

        scheduler = self._schedulers.get(runner.session_id)
        if scheduler is None:
            async def deliver(result: TurnResult) -> None:
                self._after_turn(runner)
                if on_turn is not None:
                    outcome = on_turn(result)
                    if asyncio.iscoroutine(outcome):
                        await outcome

            scheduler = AutoPlayScheduler(runner, delay=delay, on_turn=deliver, llm_config=llm_config)
            self._schedulers[runner.session_id] = scheduler
        else:
            scheduler.set_speed(delay)

        scheduler.start()
        return scheduler

    def stop_autoplay(self, session_id: Optional[str] = None) -> None:
        session_id = session_id or self._current_session_id
        if session_id is None:
            return
        scheduler = self._schedulers.pop(session_id, None)
        if scheduler is not None:
            scheduler.cancel()

    def get_scheduler(self, session_id: Optional[str] = None) -> Optional[AutoPlayScheduler]:
        session_id = session_id or self._current_session_id
        if session_id is None:
            return None
        return self._schedulers.get(session_id)

    def pause_game(self, pause: bool = True, session_id: Optional[str] = None) -> PauseResponse:
        runner = self.get_runner(session_id)
        scheduler = self._schedulers.get(runner.session_id)

        if pause:
            if scheduler is not None:
                scheduler.cancel()
            paused = runner.pause()
        else:
            paused = runner.resume()
            if scheduler is not None:
                scheduler.start()
        return PauseResponse(paused=paused)

    def stop_game(self, session_id: Optional[str] = None) -> StopResponse:
        runner = self.get_runner(session_id)
        self.stop_autoplay(runner.session_id)
        revealed = runner.stop()
        self._after_turn(runner)
        return StopResponse(acknowledged=True, revealed_word=revealed)

    def get_statistics(self, session_id: Optional[str] = None) -> StatisticsResponse:
        current = None
        session_id = session_id or self._current_session_id
        if session_id is not None:
            session = self._session_store.get(session_id)
            if session is not None:
                current = SessionMeta.from_session(session)

        stats = compute_statistics(
            self._session_store.list_sessions(),
            default_best_score=self._game_config.game.max_questions,
        )
        return StatisticsResponse(current_session=current, aggregate=stats.to_dict())

    async def close(self) -> None:
        for scheduler in list(self._schedulers.values()):
            scheduler.cancel()
            await scheduler.wait()
        self._schedulers.clear()
        logger.info("GameEngine closed")
