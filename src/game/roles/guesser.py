"""Final guess generation for llm-asks games."""

from __future__ import annotations

import logging
import re

from game.roles.base import BaseRole, History, first_line, format_history
from models.base import UpstreamFailure

logger = logging.getLogger(__name__)

FALLBACK_GUESS = "apple"

_GUESS_PREFIX_RE = re.compile(
    r"^(my\s+(final\s+)?guess\s+is|final\s+guess|guess|answer)\s*[:\-]?\s*",
    re.IGNORECASE,
)
_QUESTION_FORM_RE = re.compile(r"^is\s+it\s+(an?|the)?\s*", re.IGNORECASE)
_ARTICLE_RE = re.compile(r"^(an?|the)\s+", re.IGNORECASE)


def clean_guess(raw: str) -> str:
    text = first_line(raw)
    text = _GUESS_PREFIX_RE.sub("", text)
    text = _QUESTION_FORM_RE.sub("", text)
    text = _ARTICLE_RE.sub("", text)
    return text.strip().strip("\"'").rstrip("?.!").strip()


class Guesser(BaseRole):
    role_name = "guesser"

    async def guess(self, history: History) -> str:
        prompt = self._build_prompt(history)
        try:
            response = await self._generate(prompt, temperature=0.2)
        except UpstreamFailure as e:
            logger.error("Guesser LLM failed, using placeholder guess: %s", e)
            return FALLBACK_GUESS

        guess = clean_guess(response)
        if not guess:
            logger.warning("Guesser returned no usable guess, using placeholder")
            return FALLBACK_GUESS
        return guess

    def _build_prompt(self, history: History) -> str:
        return f"""You are playing a game of 20 Questions and must now make your final guess.

All questions and answers so far:
{format_history(history)}

Based on these answers, what is the single most likely word?

Respond with ONLY the word or short phrase, without any explanation or punctuation."""
