"""Answers yes/no questions about the secret word."""

from __future__ import annotations

import logging
import re

from game.roles.base import BaseRole, History, contains_word, first_line, format_history
from models.base import UpstreamFailure

logger = logging.getLogger(__name__)

REJECTION_MESSAGE = "Please ask a yes/no question"

FALLBACK_AFFIRMATIVE = "Yes, you're on the right track!"
FALLBACK_NEGATIVE = "No, that's not it. Please ask another yes/no question."

_LEADING_RE = re.compile(r"^(yes|no)\b[\s,.!:;-]*", re.IGNORECASE)
YES_RE = re.compile(r"\b(yes|yep|yeah|correct|indeed|absolutely)\b", re.IGNORECASE)
NO_RE = re.compile(r"\b(no|nope|nah|not|never|incorrect)\b", re.IGNORECASE)
_REJECTION_RE = re.compile(r"yes\s*(/|or)\s*no question", re.IGNORECASE)


def is_rejection(answer: str) -> bool:
    return answer.strip().rstrip(".!").lower() == REJECTION_MESSAGE.lower()


def is_affirmative(answer: str) -> bool:
    return answer.strip().lower().startswith("yes")


def fallback_answer(word: str, question: str) -> str:
    if word.lower() in question.lower():
        return FALLBACK_AFFIRMATIVE
    return FALLBACK_NEGATIVE


class Answerer(BaseRole):
    role_name = "answerer"

    @property
    def max_words(self) -> int:
        if self._agents_config:
            return self._agents_config.answerer.max_answer_words
        return 10

    async def answer(
        self,
        word: str,
        question: str,
        history: History = (),
        simulated: bool = False,
    ) -> str:
        prompt = self._build_prompt(word, question, history, simulated)
        temperature = self._agents_config.answerer.temperature if self._agents_config else 0.5

        try:
            response = await self._generate(prompt, temperature=temperature)
            return self.normalize_answer(response, word)
        except UpstreamFailure as e:
            logger.error("Answerer LLM failed, using heuristic answer: %s", e)
            return fallback_answer(word, question)

    def normalize_answer(self, raw: str, word: str) -> str:
        """Coerce a model reply into the answer contract.

        The result either starts with "Yes"/"No" and is at most
        ``max_words`` words long, or is exactly the rejection message.
        The secret word never appears in the result.
        """
        text = first_line(raw)
        if not text:
            raise UpstreamFailure("Answerer returned no usable text")

        if _REJECTION_RE.search(text):
            return REJECTION_MESSAGE

        leading = _LEADING_RE.match(text)
        if leading:
            verdict = leading.group(1).capitalize()
            rest = text[leading.end():].strip()
        elif YES_RE.search(text) and not NO_RE.search(text):
            verdict, rest = "Yes", ""
        elif NO_RE.search(text) and not YES_RE.search(text):
            verdict, rest = "No", ""
        else:
            raise UpstreamFailure(f"Answer is not yes/no shaped: {text[:60]!r}")

        if rest and contains_word(rest, word):
            logger.debug("Answer mentioned the secret word, trimming to verdict")
            rest = ""

        if not rest:
            return verdict

        words = rest.split()
        budget = self.max_words - 1
        if len(words) > budget:
            rest = " ".join(words[:budget]).rstrip(",;:")
        return f"{verdict}, {rest}"

    def _build_prompt(
        self,
        word: str,
        question: str,
        history: History,
        simulated: bool,
    ) -> str:
        if simulated:
            role_line = f'You are simulating a human player in a game of 20 Questions. You are thinking of the word "{word}".'
            question_line = f'Current question from the AI: "{question}"'
        else:
            role_line = f'You are playing a game of 20 Questions. You are thinking of the word "{word}".'
            question_line = f'Current question: "{question}"'

        return f"""{role_line}

EXTREMELY IMPORTANT: Your answers must be VERY SHORT - no more than {self.max_words} words total.

Rules:
1. Start every answer with either "Yes" or "No" only
2. Add at most 1-5 additional words if absolutely necessary
3. NEVER add explanations, justifications, or hints
4. NEVER say the secret word
5. If the question isn't yes/no, just say "{REJECTION_MESSAGE}"

Previous questions and answers:
{format_history(history)}

{question_line}

Examples of good answers:
- "Yes"
- "No"
- "Yes, sometimes"
- "No, never"
- "{REJECTION_MESSAGE}"
"""
