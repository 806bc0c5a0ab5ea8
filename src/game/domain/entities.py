"""Domain entities for the Twenty Questions game.

This module defines all core domain entities including:
- Word: The secret word with its category, difficulty and hint pool
- QuestionEntry: One counted question/answer exchange
- GameSession: A single play-through, from word selection to result
- LLMConfig: Which provider plays the questioner and answerer roles
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from game.errors import GamePaused, InvalidState, MaxQuestionsReached, NoHintsAvailable


class Category(str, Enum):
    ANIMAL = "animal"
    PLACE = "place"
    OBJECT = "object"
    FOOD = "food"
    PERSON = "person"
    CONCEPT = "concept"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GameMode(str, Enum):
    HUMAN_ASKS = "human-asks"
    LLM_ASKS = "llm-asks"


class GameResult(str, Enum):
    WIN = "win"
    LOSE = "lose"
    STOPPED = "stopped"
    ABANDONED = "abandoned"


class LLMConfig(BaseModel):
    questioner: str = "openai"
    answerer: str = "openai"


class Word(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    category: Category
    difficulty: Difficulty
    hints: Tuple[str, ...] = ()

    @field_validator("text")
    @classmethod
    def text_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("word text must not be empty")
        return v


class QuestionEntry(BaseModel):
    sequence_number: int = Field(ge=1)
    question_text: str
    answer_text: str
    asked_by_llm: bool = False
    asked_at: datetime = Field(default_factory=datetime.now)


class GameSession(BaseModel):
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    word: Word
    mode: GameMode = GameMode.HUMAN_ASKS
    llm_config: LLMConfig = Field(default_factory=LLMConfig)
    max_questions: int = 20
    question_log: List[QuestionEntry] = Field(default_factory=list)
    hints_issued: int = 0
    active: bool = True
    paused: bool = False
    started_at: datetime = Field(default_factory=datetime.now)
    paused_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    result: Optional[GameResult] = None
    final_guess: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    schema_version: str = "1.0"

    @property
    def category(self) -> Category:
        return self.word.category

    @property
    def difficulty(self) -> Difficulty:
        return self.word.difficulty

    @property
    def question_count(self) -> int:
        return len(self.question_log)

    @property
    def questions_remaining(self) -> int:
        return max(0, self.max_questions - self.question_count)

    @property
    def total_hints(self) -> int:
        return len(self.word.hints)

    @property
    def is_terminal(self) -> bool:
        return not self.active and self.result is not None

    @property
    def won(self) -> bool:
        return self.result == GameResult.WIN

    def history(self) -> List[Tuple[str, str]]:
        return [(entry.question_text, entry.answer_text) for entry in self.question_log]

    def asked_questions(self) -> List[str]:
        return [entry.question_text for entry in self.question_log]

    def ensure_playable(self) -> None:
        if not self.active:
            raise InvalidState(f"Session {self.session_id} is not active")
        if self.paused:
            raise GamePaused(f"Session {self.session_id} is paused")

    def ensure_question_budget(self) -> None:
        if self.question_count >= self.max_questions:
            raise MaxQuestionsReached(
                f"Maximum of {self.max_questions} questions reached"
            )

    def record_question(
        self,
        question_text: str,
        answer_text: str,
        asked_by_llm: bool = False,
    ) -> QuestionEntry:
        # A pause that lands while the answer is in flight does not void the turn.
        if not self.active:
            raise InvalidState(f"Session {self.session_id} is not active")
        self.ensure_question_budget()

        entry = QuestionEntry(
            sequence_number=self.question_count + 1,
            question_text=question_text,
            answer_text=answer_text,
            asked_by_llm=asked_by_llm,
        )
        self.question_log.append(entry)
        self.updated_at = datetime.now()
        return entry

    def next_hint(self) -> str:
        if not self.active:
            raise InvalidState(f"Session {self.session_id} is not active")
        if self.hints_issued >= self.total_hints:
            if self.total_hints == 0:
                raise NoHintsAvailable("No hints available for this word")
            raise NoHintsAvailable("No more hints available")

        hint = self.word.hints[self.hints_issued]
        self.hints_issued += 1
        self.updated_at = datetime.now()
        return hint

    def pause(self, now: Optional[datetime] = None) -> None:
        if not self.active:
            raise InvalidState(f"Cannot pause inactive session {self.session_id}")
        if self.paused:
            raise InvalidState(f"Session {self.session_id} is already paused")
        self.paused = True
        self.paused_at = now or datetime.now()
        self.updated_at = datetime.now()

    def resume(self, now: Optional[datetime] = None) -> None:
        if not self.active:
            raise InvalidState(f"Cannot resume inactive session {self.session_id}")
        if not self.paused:
            raise InvalidState(f"Session {self.session_id} is not paused")
        now = now or datetime.now()
        if self.paused_at is not None:
            self.started_at += now - self.paused_at
        self.paused = False
        self.paused_at = None
        self.updated_at = datetime.now()

    def elapsed_seconds(self, now: Optional[datetime] = None) -> float:
        if self.paused_at is not None:
            reference = self.paused_at
        elif self.ended_at is not None:
            reference = self.ended_at
        else:
            reference = now or datetime.now()
        return max(0.0, (reference - self.started_at).total_seconds())

    def finish(
        self,
        result: GameResult,
        final_guess: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        if not self.active:
            raise InvalidState(f"Session {self.session_id} has already ended")
        now = now or datetime.now()
        if self.paused:
            self.resume(now)
        self.active = False
        self.result = result
        self.final_guess = final_guess
        self.ended_at = now
        self.updated_at = datetime.now()
