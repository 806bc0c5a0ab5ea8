"""Timer-driven auto-play for llm-asks sessions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from game.domain.entities import LLMConfig
from game.errors import GameError, SessionBusy
from game.session_runner import GameSessionRunner, GuessResult, TurnResult

logger = logging.getLogger(__name__)

game_logger = logging.getLogger("game.session")

TurnCallback = Callable[[TurnResult], Any]


class AutoPlayScheduler:
    """Plays an llm-asks session one turn at a time with a fixed delay.

    The next delay is only armed after the previous turn's result has been
    applied. ``cancel`` stops a pending delay at once; a turn that is
    already waiting on the model is allowed to finish, and no further turn
    starts after it.
    """

    MAX_CONSECUTIVE_REJECTIONS = 5

    def __init__(
        self,
        runner: GameSessionRunner,
        delay: float = 3.0,
        on_turn: Optional[TurnCallback] = None,
        llm_config: Optional[LLMConfig] = None,
    ):
        self._runner = runner
        self._delay = delay
        self._on_turn = on_turn
        self._llm_config = llm_config
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self._in_turn = False
        self._turns_played = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def turns_played(self) -> int:
        return self._turns_played

    def set_speed(self, delay: float) -> None:
        if delay < 0:
            raise ValueError("Auto-play delay must not be negative")
        self._delay = delay

    def start(self) -> asyncio.Task:
        if self.running and (not self._cancelled or self._in_turn):
            # A turn still in flight picks the loop back up when it finishes.
            self._cancelled = False
            return self._task
        self._cancelled = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Auto-play started for session %s", self._runner.session_id)
        return self._task

    def cancel(self) -> None:
        self._cancelled = True
        if self._task is not None and not self._task.done() and not self._in_turn:
            self._task.cancel()
        logger.debug("Auto-play cancelled for session %s", self._runner.session_id)

    async def wait(self) -> None:
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    def _should_continue(self) -> bool:
        return not self._cancelled and self._runner.is_active and not self._runner.is_paused

    async def _run(self) -> None:
        rejections = 0

        while self._should_continue():
            await asyncio.sleep(self._delay)
            if not self._should_continue():
                break

            self._in_turn = True
            try:
                result = await self._play_turn()
                self._turns_played += 1
                await self._deliver(result)
            except SessionBusy:
                logger.debug("Session busy, retrying on the next tick")
                continue
            except GameError as e:
                logger.warning("Auto-play stopped: %s", e)
                break
            finally:
                self._in_turn = False

            if result.discarded or isinstance(result, GuessResult):
                break

            if result.counted:
                rejections = 0
            else:
                rejections += 1
                if rejections >= self.MAX_CONSECUTIVE_REJECTIONS:
                    logger.error(
                        "Auto-play gave up after %d rejected questions in a row", rejections
                    )
                    break

        game_logger.debug("Auto-play loop finished after %d turns", self._turns_played)

    async def _play_turn(self) -> TurnResult:
        session = self._runner.session
        if session.question_count >= session.max_questions:
            return await self._runner.llm_guess_turn(self._llm_config)
        return await self._runner.llm_question_turn(self._llm_config)

    async def _deliver(self, result: TurnResult) -> None:
        if self._on_turn is None:
            return
        outcome = self._on_turn(result)
        if asyncio.iscoroutine(outcome):
            await outcome
