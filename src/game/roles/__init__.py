"""LLM-backed game roles."""

from game.roles.answerer import Answerer, REJECTION_MESSAGE, is_affirmative, is_rejection
from game.roles.base import BaseRole, History
from game.roles.guesser import FALLBACK_GUESS, Guesser
from game.roles.judge import GuessJudge, JudgeResult, normalize
from game.roles.questioner import Questioner
from game.roles.word_selector import WordSelector, fallback_word

__all__ = [
    "Answerer",
    "BaseRole",
    "FALLBACK_GUESS",
    "GuessJudge",
    "Guesser",
    "History",
    "JudgeResult",
    "Questioner",
    "REJECTION_MESSAGE",
    "WordSelector",
    "fallback_word",
    "is_affirmative",
    "is_rejection",
    "normalize",
]
