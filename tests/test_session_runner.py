"""Tests for GameSessionRunner."""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.models import AgentsConfig, GameConfig, ReadinessConfig
from game.domain.entities import Category, Difficulty, GameMode, GameResult, LLMConfig, Word
from game.errors import (
    EmptyInput,
    GamePaused,
    InvalidState,
    MaxQuestionsReached,
    NoActiveSession,
    NoHintsAvailable,
    SessionBusy,
    WrongMode,
)
from game.roles.answerer import REJECTION_MESSAGE
from game.roles.judge import JudgeResult, lose_feedback, win_feedback
from game.session_runner import (
    GameSessionRunner,
    GuessResult,
    QuestionResult,
    acknowledges_match,
    guess_from_question,
)
from game.storage.session_store import GameSessionStore


@pytest.fixture
def word():
    return Word(
        text="penguin",
        category=Category.ANIMAL,
        difficulty=Difficulty.EASY,
        hints=("It lives in cold places.", "It cannot fly.", "It wears a natural tuxedo."),
    )


@pytest.fixture
def backend():
    backend = MagicMock()
    backend.answer = AsyncMock(return_value="No")
    backend.simulate_answer = AsyncMock(return_value="No")
    backend.ask_question = AsyncMock(return_value="Is it a mammal?")
    backend.guess = AsyncMock(return_value="penguin")
    backend.judge = AsyncMock(return_value=JudgeResult(correct=False, feedback=lose_feedback("penguin")))
    backend.assess_readiness = AsyncMock(return_value=False)
    return backend


@pytest.fixture
def store(tmp_path):
    return GameSessionStore(config=GameConfig(), base_dir=tmp_path, persist=False)


def make_runner(store, backend, word, mode=GameMode.HUMAN_ASKS, agents_config=None):
    session = store.create(word, mode=mode, llm_config=LLMConfig(questioner="gemini", answerer="openai"))
    return GameSessionRunner(
        session=session,
        session_store=store,
        backend=backend,
        agents_config=agents_config or AgentsConfig(),
    )


@pytest.fixture
def runner(store, backend, word):
    return make_runner(store, backend, word)


@pytest.fixture
def llm_runner(store, backend, word):
    return make_runner(store, backend, word, mode=GameMode.LLM_ASKS)


def fill_questions(runner, count):
    for i in range(count):
        runner.session.record_question(f"Question {i}?", "No", asked_by_llm=True)


class TestGuessShapeHelpers:
    def test_guess_from_question(self):
        assert guess_from_question("Is it a penguin?") == "penguin"
        assert guess_from_question("is it an emperor penguin") == "emperor penguin"
        assert guess_from_question("Is it the Moon?") == "Moon"
        assert guess_from_question("Does it swim?") is None

    def test_acknowledges_match(self):
        assert acknowledges_match("Yes, you got it!")
        assert acknowledges_match("Yes, correct!")
        assert not acknowledges_match("Yes")
        assert not acknowledges_match("No, that's it for animals")


class TestAsk:
    @pytest.mark.asyncio
    async def test_ask_records_question(self, runner, backend):
        result = await runner.ask("  Is it alive?  ")

        assert isinstance(result, QuestionResult)
        assert result.question == "Is it alive?"
        assert result.answer == "No"
        assert result.question_count == 1
        assert runner.session.question_log[0].asked_by_llm is False
        backend.answer.assert_awaited_once_with(
            "penguin", "Is it alive?", [], runner.session.llm_config
        )

    @pytest.mark.asyncio
    async def test_empty_question_rejected_before_llm(self, runner, backend):
        with pytest.raises(EmptyInput):
            await runner.ask("   ")
        backend.answer.assert_not_called()

    @pytest.mark.asyncio
    async def test_ask_in_llm_mode_fails(self, llm_runner):
        with pytest.raises(WrongMode):
            await llm_runner.ask("Is it alive?")

    @pytest.mark.asyncio
    async def test_twenty_questions_then_wrong_guess(self, runner):
        for i in range(20):
            result = await runner.ask("Is it alive?")
            assert result.final_guess_mode is (i + 1 >= 19)

        assert runner.question_count == 20
        with pytest.raises(MaxQuestionsReached):
            await runner.ask("Is it alive?")
        assert runner.question_count == 20
        assert runner.session.active is True

        guess = await runner.guess("x")

        assert guess.correct is False
        assert guess.revealed_word == "penguin"
        assert runner.session.result == GameResult.LOSE
        assert runner.session.final_guess == "x"

    @pytest.mark.asyncio
    async def test_pause_blocks_questions_until_resume(self, runner):
        runner.pause()

        with pytest.raises(GamePaused):
            await runner.ask("Is it alive?")
        with pytest.raises(GamePaused):
            await runner.guess("penguin")

        runner.resume()
        result = await runner.ask("Is it alive?")

        assert result.question_count == 1

    def test_pause_twice_fails(self, runner):
        runner.pause()
        with pytest.raises(InvalidState):
            runner.pause()

    def test_set_paused(self, runner):
        assert runner.set_paused(True) is True
        assert runner.set_paused(False) is False


class TestHints:
    def test_three_hints_then_exhausted(self, runner, word):
        hints = [runner.hint() for _ in range(3)]

        assert [h.hint for h in hints] == list(word.hints)
        assert len({h.hint for h in hints}) == 3
        assert hints[-1].hints_issued == 3
        assert hints[-1].total_hints == 3

        with pytest.raises(NoHintsAvailable):
            runner.hint()
        assert runner.session.hints_issued == 3

    def test_hint_after_game_over_fails(self, runner):
        runner.stop()
        with pytest.raises(NoActiveSession):
            runner.hint()


class TestGuess:
    @pytest.mark.asyncio
    async def test_correct_guess_wins(self, runner, backend):
        backend.judge.return_value = JudgeResult(correct=True, feedback=win_feedback("penguin"))

        result = await runner.guess("Penguin")

        assert result.correct is True
        assert result.feedback == "Yes, it's penguin! You win!"
        assert runner.session.result == GameResult.WIN
        assert runner.is_active is False

    @pytest.mark.asyncio
    async def test_empty_guess(self, runner, backend):
        with pytest.raises(EmptyInput):
            await runner.guess("  ")
        backend.judge.assert_not_called()

    @pytest.mark.asyncio
    async def test_guess_after_game_over(self, runner):
        await runner.guess("walrus")

        with pytest.raises(NoActiveSession):
            await runner.guess("penguin")

    @pytest.mark.asyncio
    async def test_guess_allowed_without_questions(self, runner):
        result = await runner.guess("walrus")
        assert result.question_count == 0

    @pytest.mark.asyncio
    async def test_game_over_keeps_word_out_of_info_logs(self, runner, caplog):
        with caplog.at_level(logging.DEBUG, logger="game.session"):
            await runner.guess("walrus")

        info = [r.getMessage() for r in caplog.records if r.levelno >= logging.INFO]
        debug = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert any("Game over: lose" in message for message in info)
        assert not any("penguin" in message for message in info)
        assert any("penguin" in message for message in debug)


class TestStop:
    def test_stop_reveals_word(self, runner):
        assert runner.stop() == "penguin"
        assert runner.session.result == GameResult.STOPPED
        assert runner.session.active is False

    def test_stop_keeps_word_out_of_info_logs(self, runner, caplog):
        with caplog.at_level(logging.DEBUG, logger="game.session"):
            runner.stop()

        info = [r.getMessage() for r in caplog.records if r.levelno >= logging.INFO]
        debug = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert "🛑 Game stopped" in info
        assert not any("penguin" in message for message in info)
        assert any("penguin" in message for message in debug)

    def test_stop_twice_fails(self, runner):
        runner.stop()
        with pytest.raises(NoActiveSession):
            runner.stop()

    def test_abandon(self, runner):
        runner.abandon()
        assert runner.session.result == GameResult.ABANDONED
        runner.abandon()
        assert runner.session.result == GameResult.ABANDONED


class TestLLMQuestionTurn:
    @pytest.mark.asyncio
    async def test_counted_turn(self, llm_runner, backend):
        result = await llm_runner.llm_question_turn()

        assert isinstance(result, QuestionResult)
        assert result.counted is True
        assert result.asked_by_llm is True
        assert result.question == "Is it a mammal?"
        assert llm_runner.question_count == 1
        backend.simulate_answer.assert_awaited_once()
        backend.assess_readiness.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejected_question_not_counted(self, llm_runner, backend):
        backend.simulate_answer.return_value = REJECTION_MESSAGE

        result = await llm_runner.llm_question_turn()

        assert result.counted is False
        assert result.rejected is True
        assert llm_runner.question_count == 0
        assert llm_runner.session.question_log == []

    @pytest.mark.asyncio
    async def test_override_llm_config(self, llm_runner, backend):
        override = LLMConfig(questioner="ollama", answerer="ollama")

        await llm_runner.llm_question_turn(override)

        assert backend.ask_question.call_args.args[2] == override
        assert backend.simulate_answer.call_args.args[3] == override

    @pytest.mark.asyncio
    async def test_session_config_used_by_default(self, llm_runner, backend):
        await llm_runner.llm_question_turn()

        assert backend.ask_question.call_args.args[2].questioner == "gemini"

    @pytest.mark.asyncio
    async def test_budget_exhausted(self, llm_runner, backend):
        fill_questions(llm_runner, 20)

        with pytest.raises(MaxQuestionsReached):
            await llm_runner.llm_question_turn()
        backend.ask_question.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_mode(self, runner):
        with pytest.raises(WrongMode):
            await runner.llm_question_turn()


class TestReadiness:
    @pytest.mark.asyncio
    async def test_ready_short_circuits_to_guess(self, llm_runner, backend):
        fill_questions(llm_runner, 4)
        backend.assess_readiness.return_value = True
        backend.judge.return_value = JudgeResult(correct=True, feedback=win_feedback("penguin"))

        result = await llm_runner.llm_question_turn()

        assert isinstance(result, GuessResult)
        assert result.correct is True
        assert result.guess == "penguin"
        backend.ask_question.assert_not_called()
        assert llm_runner.session.result == GameResult.WIN

    @pytest.mark.asyncio
    async def test_not_ready_keeps_asking(self, llm_runner, backend):
        fill_questions(llm_runner, 6)

        result = await llm_runner.llm_question_turn()

        assert isinstance(result, QuestionResult)
        backend.assess_readiness.assert_awaited_once()
        assert llm_runner.question_count == 7

    @pytest.mark.asyncio
    async def test_not_checked_on_odd_counts(self, llm_runner, backend):
        fill_questions(llm_runner, 5)

        await llm_runner.llm_question_turn()

        backend.assess_readiness.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_checked_below_minimum(self, llm_runner, backend):
        fill_questions(llm_runner, 2)

        await llm_runner.llm_question_turn()

        backend.assess_readiness.assert_not_called()

    @pytest.mark.asyncio
    async def test_disabled(self, store, backend, word):
        runner = make_runner(
            store, backend, word,
            mode=GameMode.LLM_ASKS,
            agents_config=AgentsConfig(readiness=ReadinessConfig(enabled=False)),
        )
        fill_questions(runner, 4)

        await runner.llm_question_turn()

        backend.assess_readiness.assert_not_called()


class TestEarlyWin:
    @pytest.mark.asyncio
    async def test_confirmed_early_win(self, llm_runner, backend):
        backend.ask_question.return_value = "Is it a penguin?"
        backend.simulate_answer.return_value = "Yes, you got it!"
        backend.judge.return_value = JudgeResult(correct=True, feedback=win_feedback("penguin"))

        result = await llm_runner.llm_question_turn()

        assert isinstance(result, GuessResult)
        assert result.early_win is True
        assert result.question_count == 1
        assert llm_runner.session.result == GameResult.WIN
        assert llm_runner.session.final_guess == "penguin"
        assert backend.judge.call_args.args[:2] == ("penguin", "penguin")

    @pytest.mark.asyncio
    async def test_judge_overrides_acknowledgment(self, llm_runner, backend):
        backend.ask_question.return_value = "Is it a puffin?"
        backend.simulate_answer.return_value = "Yes, correct!"

        result = await llm_runner.llm_question_turn()

        assert isinstance(result, QuestionResult)
        assert llm_runner.session.active is True
        assert llm_runner.question_count == 1

    @pytest.mark.asyncio
    async def test_plain_yes_does_not_consult_judge(self, llm_runner, backend):
        backend.ask_question.return_value = "Is it a bird?"
        backend.simulate_answer.return_value = "Yes"

        await llm_runner.llm_question_turn()

        backend.judge.assert_not_called()


class TestSplitLLMTurns:
    @pytest.mark.asyncio
    async def test_generate_does_not_record(self, llm_runner):
        question = await llm_runner.generate_llm_question()

        assert question == "Is it a mammal?"
        assert llm_runner.question_count == 0

    @pytest.mark.asyncio
    async def test_answer_records(self, llm_runner, backend):
        backend.simulate_answer.return_value = "Yes"

        result = await llm_runner.answer_llm_question("Does it swim?")

        assert result.counted is True
        assert llm_runner.session.question_log[0].asked_by_llm is True

    @pytest.mark.asyncio
    async def test_llm_guess_turn(self, llm_runner, backend):
        backend.judge.return_value = JudgeResult(correct=True, feedback=win_feedback("penguin"))

        result = await llm_runner.llm_guess_turn()

        assert result.guess == "penguin"
        assert result.correct is True
        assert llm_runner.session.final_guess == "penguin"


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_busy_session_rejects_other_turns(self, runner, backend):
        gate = asyncio.Event()

        async def slow_answer(*args, **kwargs):
            await gate.wait()
            return "Yes"

        backend.answer.side_effect = slow_answer

        task = asyncio.create_task(runner.ask("Is it alive?"))
        await asyncio.sleep(0)

        assert runner.is_busy is True
        with pytest.raises(SessionBusy):
            await runner.ask("Is it big?")
        with pytest.raises(SessionBusy):
            await runner.guess("penguin")
        with pytest.raises(SessionBusy):
            runner.hint()

        gate.set()
        result = await task

        assert result.question_count == 1
        assert runner.is_busy is False

    @pytest.mark.asyncio
    async def test_stop_during_call_discards_result(self, runner, backend):
        gate = asyncio.Event()

        async def slow_answer(*args, **kwargs):
            await gate.wait()
            return "Yes"

        backend.answer.side_effect = slow_answer

        task = asyncio.create_task(runner.ask("Is it alive?"))
        await asyncio.sleep(0)
        runner.stop()
        gate.set()
        result = await task

        assert result.discarded is True
        assert runner.question_count == 0
        assert runner.session.result == GameResult.STOPPED

    @pytest.mark.asyncio
    async def test_pause_during_call_still_applies_result(self, runner, backend):
        gate = asyncio.Event()

        async def slow_answer(*args, **kwargs):
            await gate.wait()
            return "Yes"

        backend.answer.side_effect = slow_answer

        task = asyncio.create_task(runner.ask("Is it alive?"))
        await asyncio.sleep(0)
        runner.pause()
        gate.set()
        result = await task

        assert result.discarded is False
        assert runner.question_count == 1
        assert runner.is_paused is True

    @pytest.mark.asyncio
    async def test_stop_during_guess_discards_verdict(self, runner, backend):
        gate = asyncio.Event()

        async def slow_judge(*args, **kwargs):
            await gate.wait()
            return JudgeResult(correct=True, feedback=win_feedback("penguin"))

        backend.judge.side_effect = slow_judge

        task = asyncio.create_task(runner.guess("penguin"))
        await asyncio.sleep(0)
        runner.stop()
        gate.set()
        result = await task

        assert result.discarded is True
        assert runner.session.result == GameResult.STOPPED
