"""Final guess judging."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from game.roles.base import BaseRole, History, extract_json_object, format_history
from models.base import UpstreamFailure

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, drop punctuation and collapse whitespace."""
    text = _PUNCTUATION_RE.sub("", text.lower().strip())
    return _WHITESPACE_RE.sub(" ", text).strip()


def win_feedback(word: str) -> str:
    return f"Yes, it's {word}! You win!"


def lose_feedback(word: str) -> str:
    return f"No, that's not right. The word was {word}. You lose."


@dataclass
class JudgeResult:
    correct: bool
    feedback: str
    explanation: Optional[str] = None
    exact_match: bool = False


class GuessJudge(BaseRole):
    role_name = "judge"

    @property
    def include_explanation(self) -> bool:
        return bool(self._agents_config and self._agents_config.judge.include_explanation)

    async def judge(self, word: str, guess: str, history: History = ()) -> JudgeResult:
        if normalize(guess) == normalize(word):
            return JudgeResult(correct=True, feedback=win_feedback(word), exact_match=True)

        prompt = self._build_prompt(word, guess, history)
        try:
            response = await self._generate(prompt, temperature=0.0)
            data = extract_json_object(response)
        except UpstreamFailure as e:
            logger.error("Judge LLM failed, treating guess as incorrect: %s", e)
            return JudgeResult(correct=False, feedback=lose_feedback(word))

        correct = data.get("correct") is True or str(data.get("correct")).lower() == "true"
        explanation = str(data.get("explanation") or "").strip() or None

        feedback = win_feedback(word) if correct else lose_feedback(word)
        if explanation and self.include_explanation:
            feedback = f"{feedback} {explanation}"
        return JudgeResult(correct=correct, feedback=feedback, explanation=explanation)

    def _build_prompt(self, word: str, guess: str, history: History) -> str:
        return f"""You are judging the final guess in a game of 20 Questions.

The secret word is: "{word}"
The player's guess is: "{guess}"

Questions and answers during the game:
{format_history(history)}

Decide whether the guess refers to the same thing as the secret word.
Synonyms and common alternative names count as correct. Related but
different things (a broader category, a part of it, a similar object) are NOT correct.

Respond ONLY with JSON:
{{"correct": true or false, "explanation": "one short sentence"}}"""
