"""Game Session Runner for managing active game sessions."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from config import AgentsConfig
from game.backend import LLMBackend
from game.domain.entities import GameMode, GameResult, GameSession, LLMConfig
from game.errors import EmptyInput, GamePaused, NoActiveSession, SessionBusy, WrongMode
from game.roles.answerer import is_affirmative, is_rejection
from game.storage.session_store import GameSessionStore

logger = logging.getLogger(__name__)

# Game event logger for turn-by-turn visibility
game_logger = logging.getLogger("game.session")

_GUESS_SHAPED_RE = re.compile(r"^\s*is\s+it\s+(?:an?|the)\s+(.+?)\s*\?*\s*$", re.IGNORECASE)
_ACKNOWLEDGMENT_RE = re.compile(
    r"\b(you got it|you guessed it|that's it|that is it|correct|exactly)\b",
    re.IGNORECASE,
)


@dataclass
class QuestionResult:
    question: str
    answer: str
    question_count: int
    counted: bool = True
    asked_by_llm: bool = False
    final_guess_mode: bool = False
    discarded: bool = False

    @property
    def rejected(self) -> bool:
        return not self.counted and not self.discarded


@dataclass
class GuessResult:
    guess: str
    correct: bool
    feedback: str
    revealed_word: str
    question_count: int
    early_win: bool = False
    discarded: bool = False


@dataclass
class HintResult:
    hint: str
    hints_issued: int
    total_hints: int


TurnResult = Union[QuestionResult, GuessResult]


def guess_from_question(question: str) -> Optional[str]:
    match = _GUESS_SHAPED_RE.match(question)
    if not match:
        return None
    return match.group(1).strip() or None


def acknowledges_match(answer: str) -> bool:
    return is_affirmative(answer) and _ACKNOWLEDGMENT_RE.search(answer) is not None


class GameSessionRunner:
    """Drives one ``GameSession`` through its turns.

    Every operation that awaits an LLM call holds the runner's lock and
    fails fast with ``SessionBusy`` when another turn is still running.
    ``pause``, ``resume`` and ``stop`` never suspend, so they apply
    immediately even while a turn is waiting on the model. A turn whose
    call returns after ``stop`` comes back marked ``discarded`` and leaves
    the session untouched.
    """

    def __init__(
        self,
        session: GameSession,
        session_store: GameSessionStore,
        backend: LLMBackend,
        agents_config: Optional[AgentsConfig] = None,
        final_guess_warning_at: int = 19,
    ):
        self._session = session
        self._session_store = session_store
        self._backend = backend
        self._agents_config = agents_config or AgentsConfig()
        self._final_guess_warning_at = final_guess_warning_at
        self._lock = asyncio.Lock()

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def is_active(self) -> bool:
        return self._session.active

    @property
    def is_paused(self) -> bool:
        return self._session.paused

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    @property
    def question_count(self) -> int:
        return self._session.question_count

    @property
    def in_final_guess_mode(self) -> bool:
        return self._session.question_count >= self._final_guess_warning_at

    def _llm_config(self, override: Optional[LLMConfig]) -> LLMConfig:
        return override or self._session.llm_config

    def _ensure_active(self) -> None:
        if not self._session.active:
            raise NoActiveSession(f"Session {self._session.session_id} is not active")

    def _ensure_turn_allowed(self) -> None:
        self._ensure_active()
        if self._session.paused:
            raise GamePaused(f"Session {self._session.session_id} is paused")
        if self._lock.locked():
            raise SessionBusy(f"Session {self._session.session_id} is busy with another turn")

    def _ensure_mode(self, mode: GameMode) -> None:
        self._ensure_active()
        if self._session.mode != mode:
            raise WrongMode(
                f"Operation requires {mode.value} mode, session is {self._session.mode.value}"
            )

    def _stopped_during_call(self) -> bool:
        if self._session.active:
            return False
        logger.info("Session %s ended while an LLM call was running, discarding result",
                    self._session.session_id)
        return True

    def _save(self) -> None:
        self._session_store.update(self._session)

    def _record(self, question: str, answer: str, asked_by_llm: bool) -> QuestionResult:
        self._session.record_question(question, answer, asked_by_llm=asked_by_llm)
        self._save()
        game_logger.info("❓ Q%d: %s", self._session.question_count, question)
        game_logger.info("💬 A%d: %s", self._session.question_count, answer)
        return QuestionResult(
            question=question,
            answer=answer,
            question_count=self._session.question_count,
            asked_by_llm=asked_by_llm,
            final_guess_mode=self.in_final_guess_mode,
        )

    async def ask(self, question: str) -> QuestionResult:
        self._ensure_mode(GameMode.HUMAN_ASKS)
        question = (question or "").strip()
        if not question:
            raise EmptyInput("Question must not be empty")
        self._ensure_turn_allowed()
        self._session.ensure_question_budget()

        async with self._lock:
            answer = await self._backend.answer(
                self._session.word.text,
                question,
                self._session.history(),
                self._session.llm_config,
            )
            if self._stopped_during_call():
                return self._discarded_question(question, answer)

            return self._record(question, answer, asked_by_llm=False)

    async def generate_llm_question(self, llm_config: Optional[LLMConfig] = None) -> str:
        self._ensure_mode(GameMode.LLM_ASKS)
        self._ensure_turn_allowed()
        self._session.ensure_question_budget()

        async with self._lock:
            question = await self._backend.ask_question(
                self._session.word.text,
                self._session.history(),
                self._llm_config(llm_config),
            )
        game_logger.debug("Questioner proposed: %s", question)
        return question

    async def answer_llm_question(
        self,
        question: str,
        llm_config: Optional[LLMConfig] = None,
    ) -> QuestionResult:
        self._ensure_mode(GameMode.LLM_ASKS)
        question = (question or "").strip()
        if not question:
            raise EmptyInput("Question must not be empty")
        self._ensure_turn_allowed()
        self._session.ensure_question_budget()

        async with self._lock:
            return await self._answer_llm_question(question, self._llm_config(llm_config))

    async def _answer_llm_question(self, question: str, llm_config: LLMConfig) -> QuestionResult:
        answer = await self._backend.simulate_answer(
            self._session.word.text,
            question,
            self._session.history(),
            llm_config,
        )
        if self._stopped_during_call():
            return self._discarded_question(question, answer, asked_by_llm=True)

        if is_rejection(answer):
            game_logger.info("🚫 Rejected question, not counted: %s", question)
            return QuestionResult(
                question=question,
                answer=answer,
                question_count=self._session.question_count,
                counted=False,
                asked_by_llm=True,
                final_guess_mode=self.in_final_guess_mode,
            )

        return self._record(question, answer, asked_by_llm=True)

    async def llm_question_turn(self, llm_config: Optional[LLMConfig] = None) -> TurnResult:
        """Run one full llm-asks turn.

        Depending on the state of the game this is a readiness-triggered
        final guess, a counted question and answer, a rejected question
        that leaves the budget untouched, or a question that the judge
        confirms as an early win.
        """
        self._ensure_mode(GameMode.LLM_ASKS)
        self._ensure_turn_allowed()
        self._session.ensure_question_budget()
        llm_config = self._llm_config(llm_config)

        async with self._lock:
            if self._readiness_due():
                ready = await self._backend.assess_readiness(self._session.history(), llm_config)
                if self._stopped_during_call():
                    return self._discarded_guess("")
                if ready:
                    game_logger.info("🧠 Questioner is ready to guess after %d questions",
                                     self._session.question_count)
                    return await self._llm_guess(llm_config)

            question = await self._backend.ask_question(
                self._session.word.text,
                self._session.history(),
                llm_config,
            )
            if self._stopped_during_call():
                return self._discarded_question(question, "", asked_by_llm=True)

            result = await self._answer_llm_question(question, llm_config)
            if not result.counted:
                return result

            candidate = guess_from_question(question)
            if candidate and acknowledges_match(result.answer):
                early = await self._try_early_win(candidate, llm_config)
                if early is not None:
                    return early
            return result

    def _readiness_due(self) -> bool:
        readiness = self._agents_config.readiness
        count = self._session.question_count
        if not readiness.enabled or count < readiness.min_questions:
            return False
        return count % max(1, readiness.every) == 0

    async def _try_early_win(self, candidate: str, llm_config: LLMConfig) -> Optional[GuessResult]:
        verdict = await self._backend.judge(
            self._session.word.text,
            candidate,
            self._session.history(),
            llm_config,
        )
        if self._stopped_during_call() or not verdict.correct:
            return None

        game_logger.info("🎯 Question '%s' confirmed as the word, early win", candidate)
        self._session_store.finish(self._session.session_id, GameResult.WIN, final_guess=candidate)
        return GuessResult(
            guess=candidate,
            correct=True,
            feedback=verdict.feedback,
            revealed_word=self._session.word.text,
            question_count=self._session.question_count,
            early_win=True,
        )

    async def llm_guess_turn(self, llm_config: Optional[LLMConfig] = None) -> GuessResult:
        self._ensure_mode(GameMode.LLM_ASKS)
        self._ensure_turn_allowed()

        async with self._lock:
            return await self._llm_guess(self._llm_config(llm_config))

    async def _llm_guess(self, llm_config: LLMConfig) -> GuessResult:
        guess = await self._backend.guess(self._session.history(), llm_config)
        if self._stopped_during_call():
            return self._discarded_guess(guess)
        game_logger.info("🤖 Questioner guesses: %s", guess)
        return await self._judge_and_finish(guess, llm_config)

    async def guess(self, guess: str) -> GuessResult:
        self._ensure_active()
        guess = (guess or "").strip()
        if not guess:
            raise EmptyInput("Guess must not be empty")
        self._ensure_turn_allowed()

        async with self._lock:
            game_logger.info("🙋 Player guesses: %s", guess)
            return await self._judge_and_finish(guess, self._session.llm_config)

    async def _judge_and_finish(self, guess: str, llm_config: LLMConfig) -> GuessResult:
        verdict = await self._backend.judge(
            self._session.word.text,
            guess,
            self._session.history(),
            llm_config,
        )
        if self._stopped_during_call():
            return self._discarded_guess(guess)

        self._session_store.end(self._session.session_id, won=verdict.correct, final_guess=guess)
        game_logger.info("🏁 Game over: %s", "win" if verdict.correct else "lose")
        game_logger.debug("The word was %s", self._session.word.text)
        return GuessResult(
            guess=guess,
            correct=verdict.correct,
            feedback=verdict.feedback,
            revealed_word=self._session.word.text,
            question_count=self._session.question_count,
        )

    def hint(self) -> HintResult:
        self._ensure_active()
        if self._lock.locked():
            raise SessionBusy(f"Session {self._session.session_id} is busy with another turn")

        hint = self._session.next_hint()
        self._save()
        game_logger.info("💡 Hint %d/%d: %s",
                         self._session.hints_issued, self._session.total_hints, hint)
        return HintResult(
            hint=hint,
            hints_issued=self._session.hints_issued,
            total_hints=self._session.total_hints,
        )

    def pause(self) -> bool:
        self._session.pause()
        self._save()
        game_logger.info("⏸️ Game paused")
        return self._session.paused

    def resume(self) -> bool:
        self._session.resume()
        self._save()
        game_logger.info("▶️ Game resumed")
        return self._session.paused

    def set_paused(self, paused: bool) -> bool:
        if paused:
            return self.pause()
        return self.resume()

    def stop(self) -> str:
        self._ensure_active()
        self._session_store.finish(self._session.session_id, GameResult.STOPPED)
        game_logger.info("🛑 Game stopped")
        game_logger.debug("The word was %s", self._session.word.text)
        return self._session.word.text

    def abandon(self) -> None:
        if not self._session.active:
            return
        self._session_store.finish(self._session.session_id, GameResult.ABANDONED)
        game_logger.debug("Session %s abandoned", self._session.session_id)

    def _discarded_question(
        self,
        question: str,
        answer: str,
        asked_by_llm: bool = False,
    ) -> QuestionResult:
        return QuestionResult(
            question=question,
            answer=answer,
            question_count=self._session.question_count,
            counted=False,
            asked_by_llm=asked_by_llm,
            discarded=True,
        )

    def _discarded_guess(self, guess: str) -> GuessResult:
        return GuessResult(
            guess=guess,
            correct=False,
            feedback="",
            revealed_word=self._session.word.text,
            question_count=self._session.question_count,
            discarded=True,
        )
