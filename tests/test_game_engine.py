"""Tests for GameEngine."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from game.domain.entities import Category, Difficulty, GameMode, GameResult, LLMConfig, Word
from game.engine import GameEngine
from game.errors import (
    InputValidationError,
    NoActiveSession,
    SessionNotFound,
    WrongMode,
)
from game.roles.judge import JudgeResult, lose_feedback, win_feedback
from game.session_runner import GuessResult


@pytest.fixture
def temp_workspace(tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    (config_dir / "game.yaml").write_text("""
directories:
  game_storage_dir: game_storage
game:
  max_questions: 20
  default_difficulty: medium
  default_mode: human-asks
  persist_sessions: false
""")

    (config_dir / "agents.yaml").write_text("""
readiness:
  enabled: false
autoplay:
  turn_delay_seconds: 0
  speeds:
    normal: 0
    fast: 0
""")

    return {"base": tmp_path, "config": config_dir}


@pytest.fixture
def backend():
    backend = MagicMock()
    backend.select_word = AsyncMock(
        return_value=Word(
            text="penguin",
            category=Category.ANIMAL,
            difficulty=Difficulty.MEDIUM,
            hints=("It lives in cold places.", "It cannot fly.", "It wears a natural tuxedo."),
        )
    )
    backend.answer = AsyncMock(return_value="No")
    backend.simulate_answer = AsyncMock(return_value="No")
    backend.ask_question = AsyncMock(return_value="Is it a mammal?")
    backend.guess = AsyncMock(return_value="walrus")
    backend.judge = AsyncMock(return_value=JudgeResult(correct=False, feedback=lose_feedback("penguin")))
    backend.assess_readiness = AsyncMock(return_value=False)
    return backend


@pytest.fixture
def engine(temp_workspace, backend):
    return GameEngine(
        config_dir=temp_workspace["config"],
        base_dir=temp_workspace["base"],
        backend=backend,
    )


class TestGameEngineInit:
    def test_engine_initialization(self, engine, temp_workspace):
        assert engine.config_dir == temp_workspace["config"]
        assert engine.game_config.game.persist_sessions is False
        assert engine.session_store.persistent is False
        assert engine.current_session_id is None
        assert engine.debug is False

    def test_default_llm_config(self, engine):
        assert engine.default_llm_config() == LLMConfig(questioner="openai", answerer="openai")

    def test_warns_about_missing_credentials(self, temp_workspace, monkeypatch, caplog):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        with caplog.at_level(logging.WARNING, logger="game.engine"):
            GameEngine(config_dir=temp_workspace["config"], base_dir=temp_workspace["base"])

        assert "has no credentials" in caplog.text

    def test_no_warning_with_injected_backend(self, temp_workspace, backend, monkeypatch, caplog):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        with caplog.at_level(logging.WARNING, logger="game.engine"):
            GameEngine(config_dir=temp_workspace["config"], base_dir=temp_workspace["base"],
                       backend=backend)

        assert "credentials" not in caplog.text


class TestStartGame:
    @pytest.mark.asyncio
    async def test_start_game(self, engine, backend):
        response = await engine.start_game(difficulty="easy", category="animal")

        assert response.session.mode == GameMode.HUMAN_ASKS
        assert response.session.question_count == 0
        assert response.session.max_questions == 20
        assert response.session.active is True
        assert response.word is None
        assert response.hints is None
        assert engine.current_session_id == response.session.session_id

        args = backend.select_word.call_args.args
        assert args[0] == Category.ANIMAL
        assert args[1] == Difficulty.EASY
        assert args[3] == []

    @pytest.mark.asyncio
    async def test_defaults_applied(self, engine, backend):
        await engine.start_game()

        args = backend.select_word.call_args.args
        assert args[0] is None
        assert args[1] == Difficulty.MEDIUM

    @pytest.mark.asyncio
    async def test_debug_reveals_word(self, temp_workspace, backend):
        engine = GameEngine(
            config_dir=temp_workspace["config"],
            base_dir=temp_workspace["base"],
            backend=backend,
            debug=True,
        )

        response = await engine.start_game()

        assert response.word == "penguin"
        assert len(response.hints) == 3

    @pytest.mark.asyncio
    async def test_invalid_difficulty(self, engine, backend):
        with pytest.raises(InputValidationError):
            await engine.start_game(difficulty="impossible")
        backend.select_word.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_mode(self, engine):
        with pytest.raises(InputValidationError):
            await engine.start_game(mode="robot-asks")

    @pytest.mark.asyncio
    async def test_recent_words_avoided(self, engine, backend):
        await engine.start_game()
        await engine.start_game()

        assert backend.select_word.call_args.args[3] == ["penguin"]

    @pytest.mark.asyncio
    async def test_replacing_session_abandons_it(self, engine):
        first = await engine.start_game()
        second = await engine.start_game()

        old = engine.session_store.load(first.session.session_id)
        assert old.result == GameResult.ABANDONED
        assert engine.current_session_id == second.session.session_id

        stats = engine.get_statistics()
        assert stats.aggregate["games_played"] == 0

    @pytest.mark.asyncio
    async def test_hints_per_word_reaches_word_selection(self, temp_workspace):
        config_dir = temp_workspace["config"]
        (config_dir / "game.yaml").write_text("game:\n  persist_sessions: false\n  hints_per_word: 5\n")
        (config_dir / "models.yaml").write_text("""
default_questioner: offline
default_answerer: offline
providers:
  offline:
    transport: http
    base_url: https://example.test/v1
    api_key: ""
""")
        engine = GameEngine(config_dir=config_dir, base_dir=temp_workspace["base"], debug=True)

        response = await engine.start_game(difficulty="easy", category="animal")

        assert len(response.hints) == 5
        assert engine.get_session(response.session.session_id).total_hints == 5


class TestHumanAsksFlow:
    @pytest.mark.asyncio
    async def test_operations_require_session(self, engine):
        with pytest.raises(NoActiveSession):
            await engine.ask_question("Is it alive?")
        with pytest.raises(NoActiveSession):
            engine.request_hint()
        with pytest.raises(NoActiveSession):
            engine.stop_game()

    @pytest.mark.asyncio
    async def test_unknown_session_id(self, engine):
        with pytest.raises(SessionNotFound):
            await engine.ask_question("Is it alive?", session_id="missing")

    @pytest.mark.asyncio
    async def test_question_and_hint(self, engine):
        await engine.start_game()

        answer = await engine.ask_question("Is it alive?")
        hint = engine.request_hint()

        assert answer.question_text == "Is it alive?"
        assert answer.answer_text == "No"
        assert answer.question_count == 1
        assert answer.final_guess_mode is False
        assert hint.hint_text == "It lives in cold places."
        assert hint.hints_issued == 1
        assert hint.total_hints == 3

    @pytest.mark.asyncio
    async def test_guess_ends_game(self, engine, backend):
        backend.judge.return_value = JudgeResult(correct=True, feedback=win_feedback("penguin"))
        start = await engine.start_game()

        response = await engine.make_guess("penguin")

        assert response.correct is True
        assert response.feedback_text == "Yes, it's penguin! You win!"
        assert response.revealed_word == "penguin"
        assert engine.current_session_id is None
        with pytest.raises(NoActiveSession):
            await engine.make_guess("penguin")

        stats = engine.get_statistics(start.session.session_id)
        assert stats.current_session.result == GameResult.WIN
        assert stats.aggregate["games_won"] == 1
        assert stats.aggregate["best_score"] == 0

    @pytest.mark.asyncio
    async def test_stop_game(self, engine):
        await engine.start_game()

        response = engine.stop_game()

        assert response.acknowledged is True
        assert response.revealed_word == "penguin"
        assert engine.current_session_id is None
        stats = engine.get_statistics()
        assert stats.current_session is None
        assert stats.aggregate["games_played"] == 1
        assert stats.aggregate["games_won"] == 0

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, engine):
        await engine.start_game()

        assert engine.pause_game(True).paused is True
        assert engine.get_session().paused is True
        assert engine.pause_game(False).paused is False

    @pytest.mark.asyncio
    async def test_llm_operations_rejected_in_human_mode(self, engine):
        await engine.start_game()

        with pytest.raises(WrongMode):
            await engine.llm_question_turn()


class TestLLMAsksFlow:
    @pytest.mark.asyncio
    async def test_split_turns(self, engine):
        await engine.start_game(mode="llm-asks")

        question = await engine.llm_question_turn()
        answer = await engine.llm_answer_turn(question.question_text)

        assert question.question_text == "Is it a mammal?"
        assert question.question_count == 0
        assert answer.answer_text == "No"
        assert answer.counted is True
        assert answer.question_count == 1

    @pytest.mark.asyncio
    async def test_llm_guess_turn(self, engine):
        await engine.start_game(mode="llm-asks")

        response = await engine.llm_guess_turn()

        assert response.guess_text == "walrus"
        assert response.correct is False
        assert response.revealed_word == "penguin"
        assert engine.current_session_id is None

    @pytest.mark.asyncio
    async def test_play_llm_turn(self, engine):
        await engine.start_game(mode="llm-asks")

        result = await engine.play_llm_turn()

        assert result.question == "Is it a mammal?"
        assert engine.get_session().question_count == 1

    @pytest.mark.asyncio
    async def test_autoplay_to_completion(self, engine):
        start = await engine.start_game(mode="llm-asks")
        results = []

        scheduler = engine.start_autoplay(speed="fast", on_turn=results.append)
        await scheduler.wait()

        assert len(results) == 21
        assert isinstance(results[-1], GuessResult)
        assert engine.current_session_id is None
        assert engine.get_scheduler(start.session.session_id) is None
        assert engine.session_store.load(start.session.session_id).result == GameResult.LOSE

    @pytest.mark.asyncio
    async def test_pause_cancels_autoplay(self, engine):
        await engine.start_game(mode="llm-asks")

        def on_turn(result):
            engine.pause_game(True)

        scheduler = engine.start_autoplay(on_turn=on_turn)
        await scheduler.wait()

        assert engine.get_session().question_count == 1
        assert engine.get_session().paused is True

    @pytest.mark.asyncio
    async def test_unknown_speed(self, engine):
        await engine.start_game(mode="llm-asks")

        with pytest.raises(ValueError):
            engine.start_autoplay(speed="ludicrous")


class TestConcurrentSessions:
    @pytest.mark.asyncio
    async def test_sessions_addressed_by_id(self, engine):
        first = await engine.start_game()
        second = await engine.start_game(mode="llm-asks", make_current=False)

        await engine.ask_question("Is it alive?")
        await engine.play_llm_turn(session_id=second.session.session_id)

        assert engine.current_session_id == first.session.session_id
        assert engine.get_session().question_count == 1
        assert engine.get_session(second.session.session_id).question_count == 1
        assert engine.session_store.load(first.session.session_id).active is True

    @pytest.mark.asyncio
    async def test_list_sessions(self, engine):
        await engine.start_game()
        await engine.start_game(mode="llm-asks", make_current=False)

        assert len(engine.list_sessions()) == 2
        assert len(engine.list_sessions(mode=GameMode.LLM_ASKS)) == 1

    @pytest.mark.asyncio
    async def test_close_cancels_autoplay(self, temp_workspace, backend):
        (temp_workspace["config"] / "agents.yaml").write_text("autoplay:\n  turn_delay_seconds: 60\n")
        engine = GameEngine(
            config_dir=temp_workspace["config"],
            base_dir=temp_workspace["base"],
            backend=backend,
        )
        await engine.start_game(mode="llm-asks")
        scheduler = engine.start_autoplay()

        await engine.close()

        assert scheduler.running is False
        backend.ask_question.assert_not_called()
