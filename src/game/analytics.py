"""Aggregate statistics over finished game sessions.

Statistics are always derived from the stored sessions rather than kept
as running totals, so they can be recomputed at any time. Only sessions
that ended in a win, a loss or an explicit stop count as played; active
and abandoned sessions are ignored.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from game.domain.entities import GameResult, GameSession

logger = logging.getLogger(__name__)

DEFAULT_BEST_SCORE = 20

PLAYED_RESULTS = (GameResult.WIN, GameResult.LOSE, GameResult.STOPPED)


@dataclass
class BreakdownEntry:
    played: int = 0
    won: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"played": self.played, "won": self.won}


@dataclass
class GameStatistics:
    games_played: int = 0
    games_won: int = 0
    average_questions: int = 0
    best_score: int = DEFAULT_BEST_SCORE
    by_category: Dict[str, BreakdownEntry] = field(default_factory=dict)
    by_difficulty: Dict[str, BreakdownEntry] = field(default_factory=dict)
    average_completion_seconds: Optional[float] = None

    @property
    def win_rate(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.games_won / self.games_played

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games_played": self.games_played,
            "games_won": self.games_won,
            "win_rate": round(self.win_rate, 4),
            "average_questions": self.average_questions,
            "best_score": self.best_score,
            "by_category": {k: v.to_dict() for k, v in self.by_category.items()},
            "by_difficulty": {k: v.to_dict() for k, v in self.by_difficulty.items()},
            "average_completion_seconds": (
                round(self.average_completion_seconds, 1)
                if self.average_completion_seconds is not None
                else None
            ),
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def counts_as_played(session: GameSession) -> bool:
    return not session.active and session.result in PLAYED_RESULTS


def compute_statistics(
    sessions: Iterable[GameSession],
    default_best_score: int = DEFAULT_BEST_SCORE,
) -> GameStatistics:
    stats = GameStatistics(best_score=default_best_score)

    total_questions = 0
    total_seconds = 0.0
    best: Optional[int] = None

    for session in sessions:
        if not counts_as_played(session):
            continue

        won = session.won
        stats.games_played += 1
        total_questions += session.question_count
        total_seconds += session.elapsed_seconds()

        category = stats.by_category.setdefault(session.category.value, BreakdownEntry())
        difficulty = stats.by_difficulty.setdefault(session.difficulty.value, BreakdownEntry())
        category.played += 1
        difficulty.played += 1

        if won:
            stats.games_won += 1
            category.won += 1
            difficulty.won += 1
            if best is None or session.question_count < best:
                best = session.question_count

    if stats.games_played:
        stats.average_questions = round_half_up(total_questions / stats.games_played)
        stats.average_completion_seconds = total_seconds / stats.games_played
    if best is not None:
        stats.best_score = best

    logger.debug("Computed statistics over %d played sessions", stats.games_played)
    return stats
