"""Error taxonomy for game operations.

Every error carries a stable ``code`` so outer surfaces (CLI, JSON
responses) can report failures without matching on message text.
"""

from __future__ import annotations

from models.base import UpstreamFailure


class GameError(Exception):
    code = "game_error"


class InputValidationError(GameError, ValueError):
    code = "validation_error"


class EmptyInput(InputValidationError):
    code = "empty_input"


class NoActiveSession(GameError):
    code = "no_active_session"


class SessionNotFound(NoActiveSession):
    code = "session_not_found"


class InvalidState(GameError):
    code = "invalid_state"


class MaxQuestionsReached(InvalidState):
    code = "max_questions_reached"


class NoHintsAvailable(InvalidState):
    code = "no_hints_available"


class WrongMode(InvalidState):
    code = "wrong_mode"


class GamePaused(InvalidState):
    code = "game_paused"


class SessionBusy(GameError):
    code = "session_busy"


__all__ = [
    "GameError",
    "InputValidationError",
    "EmptyInput",
    "NoActiveSession",
    "SessionNotFound",
    "InvalidState",
    "MaxQuestionsReached",
    "NoHintsAvailable",
    "WrongMode",
    "GamePaused",
    "SessionBusy",
    "UpstreamFailure",
]
