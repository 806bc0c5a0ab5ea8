"""Request/response models for the engine's public operations."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from game.domain.entities import Category, Difficulty, GameMode, GameResult, GameSession, LLMConfig


class SessionMeta(BaseModel):
    session_id: str
    mode: GameMode
    category: Category
    difficulty: Difficulty
    llm_config: LLMConfig
    question_count: int
    max_questions: int
    hints_issued: int
    total_hints: int
    active: bool
    paused: bool
    result: Optional[GameResult] = None
    started_at: datetime
    elapsed_seconds: float

    @classmethod
    def from_session(cls, session: GameSession) -> "SessionMeta":
        return cls(
            session_id=session.session_id,
            mode=session.mode,
            category=session.category,
            difficulty=session.difficulty,
            llm_config=session.llm_config,
            question_count=session.question_count,
            max_questions=session.max_questions,
            hints_issued=session.hints_issued,
            total_hints=session.total_hints,
            active=session.active,
            paused=session.paused,
            result=session.result,
            started_at=session.started_at,
            elapsed_seconds=round(session.elapsed_seconds(), 1),
        )


class StartGameResponse(BaseModel):
    session: SessionMeta
    word: Optional[str] = None
    hints: Optional[List[str]] = None


class AskQuestionResponse(BaseModel):
    question_text: str
    answer_text: str
    question_count: int
    final_guess_mode: bool = False


class HintResponse(BaseModel):
    hint_text: str
    hints_issued: int
    total_hints: int


class GuessResponse(BaseModel):
    correct: bool
    feedback_text: str
    revealed_word: str


class LLMQuestionResponse(BaseModel):
    question_text: str
    question_count: int


class LLMAnswerResponse(BaseModel):
    question_text: str
    answer_text: str
    question_count: int
    counted: bool = True


class LLMGuessResponse(BaseModel):
    guess_text: str
    correct: bool
    feedback_text: str
    revealed_word: str


class PauseResponse(BaseModel):
    paused: bool


class StopResponse(BaseModel):
    acknowledged: bool = True
    revealed_word: Optional[str] = None


class StatisticsResponse(BaseModel):
    current_session: Optional[SessionMeta] = None
    aggregate: Dict[str, Any] = Field(default_factory=dict)
