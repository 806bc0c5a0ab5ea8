"""CLI command handlers for the Twenty Questions game.

This module provides individual command implementations that can be used
by the CLI entry point or tested independently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from game.cli.app import GameCLIApp
from game.domain.entities import GameMode
from game.errors import GameError
from game.session_runner import GuessResult, TurnResult

COMMAND_PREFIXES = ("/", "!")

HELP_TEXT = """Available commands:
/hint          - Reveal the next hint
/guess <word>  - Make your final guess
/pause         - Pause the game clock
/resume        - Resume a paused game
/stop          - Give up and reveal the word
/status        - Show the current game status
/help          - Show this help

Anything else is sent as a yes/no question."""


@dataclass
class CommandResult:
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    game_over: bool = False


def _error_result(message: str, exc: GameError) -> CommandResult:
    return CommandResult(
        success=False,
        message=f"{message}: {exc}",
        error=exc.code,
    )


async def start_game(
    app: GameCLIApp,
    mode: str = GameMode.HUMAN_ASKS.value,
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
) -> CommandResult:
    try:
        response = await app.engine.start_game(mode=mode, difficulty=difficulty, category=category)
    except GameError as e:
        return _error_result("Failed to start game", e)

    meta = response.session
    lines = [
        f"New game started ({meta.mode.value}).",
        f"Category: {meta.category.value}, difficulty: {meta.difficulty.value}.",
        f"You have {meta.max_questions} questions and {meta.total_hints} hints.",
    ]
    if response.word:
        lines.append(f"[debug] The word is: {response.word}")

    return CommandResult(
        success=True,
        message="\n".join(lines),
        data=response.model_dump(mode="json"),
    )


def get_status(app: GameCLIApp, session_id: Optional[str] = None) -> CommandResult:
    try:
        status = app.get_session_status(session_id)
    except GameError as e:
        return _error_result("No status available", e)
    return CommandResult(success=True, message="Session status retrieved.", data=status)


def get_statistics(app: GameCLIApp) -> CommandResult:
    response = app.engine.get_statistics()
    return CommandResult(
        success=True,
        message="Statistics computed.",
        data=response.model_dump(mode="json"),
    )


def show_config(app: GameCLIApp) -> CommandResult:
    return CommandResult(
        success=True,
        message="Effective configuration.",
        data=app.get_config_summary(),
    )


async def handle_play_input(app: GameCLIApp, text: str) -> CommandResult:
    text = text.strip()
    if not text:
        return CommandResult(success=False, message="Please enter a question.", error="empty_input")

    if text.startswith(COMMAND_PREFIXES):
        return await _handle_command(app, text)

    try:
        response = await app.engine.ask_question(text)
    except GameError as e:
        return _error_result("Question not accepted", e)

    message = f"Q{response.question_count}: {response.answer_text}"
    if response.final_guess_mode:
        remaining = app.engine.get_session().questions_remaining
        message += f"\n({remaining} question(s) left. Time to think about your guess: /guess <word>)"
    return CommandResult(success=True, message=message, data=response.model_dump())


async def _handle_command(app: GameCLIApp, text: str) -> CommandResult:
    parts = text.lstrip("/!").split(maxsplit=1)
    cmd = parts[0].lower() if parts else ""
    arg = parts[1] if len(parts) > 1 else ""
    engine = app.engine

    try:
        if cmd in ("hint", "h"):
            hint = engine.request_hint()
            return CommandResult(
                success=True,
                message=f"Hint {hint.hints_issued}/{hint.total_hints}: {hint.hint_text}",
                data=hint.model_dump(),
            )

        if cmd in ("guess", "g"):
            guess = await engine.make_guess(arg)
            return CommandResult(
                success=True,
                message=guess.feedback_text,
                data=guess.model_dump(),
                game_over=True,
            )

        if cmd == "pause":
            engine.pause_game(True)
            return CommandResult(success=True, message="Game paused. Type /resume to continue.")

        if cmd == "resume":
            engine.pause_game(False)
            return CommandResult(success=True, message="Game resumed.")

        if cmd in ("stop", "quit", "q"):
            stopped = engine.stop_game()
            return CommandResult(
                success=True,
                message=f"Game stopped. The word was: {stopped.revealed_word}",
                data=stopped.model_dump(),
                game_over=True,
            )

        if cmd in ("status", "s"):
            return get_status(app)

        if cmd in ("help", "?"):
            return CommandResult(success=True, message=HELP_TEXT)

    except GameError as e:
        return _error_result(f"/{cmd} failed", e)

    return CommandResult(
        success=False,
        message=f"Unknown command: {cmd}. Type /help for available commands.",
        error="unknown_command",
    )


async def play_game(
    app: GameCLIApp,
    input_handler: Callable[[], str],
    output_handler: Callable[[str], None],
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
) -> CommandResult:
    started = await start_game(app, GameMode.HUMAN_ASKS.value, difficulty, category)
    if not started.success:
        return started
    output_handler(started.message)
    output_handler("Ask yes/no questions. Type /help for commands.")

    while True:
        try:
            user_input = input_handler()
        except (EOFError, KeyboardInterrupt):
            stopped = await _handle_command(app, "/stop")
            output_handler(stopped.message)
            return CommandResult(
                success=True,
                message="Game interrupted by user.",
                data={"interrupted": True},
                game_over=True,
            )

        if not user_input.strip():
            continue

        result = await handle_play_input(app, user_input)
        output_handler(result.message)

        if result.game_over:
            return CommandResult(
                success=True,
                message="Game completed.",
                data=result.data,
                game_over=True,
            )


def describe_turn(result: TurnResult) -> str:
    if isinstance(result, GuessResult):
        prefix = "Early win! " if result.early_win else ""
        return f"{prefix}Final guess: {result.guess}\n{result.feedback}"
    if result.discarded:
        return "Turn discarded."
    if not result.counted:
        return f"(not counted) Q: {result.question}\nA: {result.answer}"
    return f"Q{result.question_count}: {result.question}\nA{result.question_count}: {result.answer}"


async def watch_game(
    app: GameCLIApp,
    output_handler: Callable[[str], None],
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    speed: Optional[str] = None,
) -> CommandResult:
    started = await start_game(app, GameMode.LLM_ASKS.value, difficulty, category)
    if not started.success:
        return started
    output_handler(started.message)

    engine = app.engine
    session_id = engine.current_session_id

    def on_turn(result: TurnResult) -> None:
        output_handler(describe_turn(result))

    try:
        scheduler = engine.start_autoplay(session_id=session_id, speed=speed, on_turn=on_turn)
    except ValueError as e:
        engine.stop_game(session_id)
        return CommandResult(success=False, message=str(e), error="invalid_speed")
    await scheduler.wait()

    session = engine.get_session(session_id)
    if session.active:
        stopped = engine.stop_game(session_id)
        output_handler(f"Auto-play ended early. The word was: {stopped.revealed_word}")

    return CommandResult(
        success=True,
        message=f"Game finished: {session.result.value} after {session.question_count} questions.",
        data={
            "session_id": session_id,
            "result": session.result.value,
            "question_count": session.question_count,
            "word": session.word.text,
        },
        game_over=True,
    )
