"""LLM questioner for llm-asks games."""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence, TYPE_CHECKING

from config.models import QuestionerConfig
from game.roles.base import BaseRole, History, extract_json_object, first_line, format_history
from models.base import UpstreamFailure

if TYPE_CHECKING:
    from config import AgentsConfig
    from models.base import LLMClient

logger = logging.getLogger(__name__)

_PREFIX_RE = re.compile(r"^(q\d+|question\s*\d*|\d+)\s*[:.)-]\s*", re.IGNORECASE)
_READY_RE = re.compile(r"^\W*(yes|ready)\b", re.IGNORECASE)


class Questioner(BaseRole):
    role_name = "questioner"

    def __init__(
        self,
        llm_client: LLMClient,
        agents_config: Optional[AgentsConfig] = None,
    ):
        super().__init__(llm_client, agents_config)
        self._settings = agents_config.questioner if agents_config else QuestionerConfig()
        self._forbidden = [re.compile(p, re.IGNORECASE) for p in self._settings.forbidden_patterns]

    def is_forbidden(self, question: str) -> bool:
        return any(pattern.search(question) for pattern in self._forbidden)

    async def generate(self, word: str, history: History = ()) -> str:
        asked = [q for q, _ in history]
        prompt = self._build_question_prompt(word, history)

        try:
            response = await self._generate(prompt)
            question = self._parse_question(response)
        except UpstreamFailure as e:
            logger.warning("Questioner LLM failed, using fallback question: %s", e)
            return self.fallback_question(asked)

        if self.is_forbidden(question):
            logger.info("Rejected orthographic question from questioner: %s", question)
            return self.fallback_question(asked)
        if _already_asked(question, asked):
            logger.info("Questioner repeated a question: %s", question)
            return self.fallback_question(asked)
        return question

    def fallback_question(self, asked: Sequence[str]) -> str:
        for candidate in self._settings.fallback_questions:
            if not _already_asked(candidate, asked):
                return candidate
        return self._settings.catch_all_question

    async def assess_readiness(self, history: History) -> bool:
        prompt = self._build_readiness_prompt(history)
        try:
            response = await self._generate(prompt, temperature=0.0)
        except UpstreamFailure as e:
            logger.warning("Readiness assessment failed, continuing to ask: %s", e)
            return False

        try:
            data = extract_json_object(response)
            ready = data.get("ready")
            return ready is True or str(ready).lower() == "true"
        except UpstreamFailure:
            return _READY_RE.match(response) is not None

    def _parse_question(self, response: str) -> str:
        question = _PREFIX_RE.sub("", first_line(response)).strip().strip('"').strip()
        if not question:
            raise UpstreamFailure("Questioner returned an empty question")
        if not question.endswith("?"):
            question = question.rstrip(".!") + "?"
        return question

    def _build_question_prompt(self, word: str, history: History) -> str:
        return f"""You are playing a game of 20 Questions. You are trying to guess a word using yes/no questions.
The word you are trying to guess is "{word}". But pretend you don't know what the word is.

Previous questions and answers:
{format_history(history)}

Based on the previous questions and answers, generate ONE strategic yes/no question that would help
you narrow down what the word is.

Rules:
1. Ask about real-world properties only: what it is, what it does, where it is found, how it is used.
2. NEVER ask about spelling, letters, word length, syllables, rhymes or any property of the word as text.
3. Do not repeat a question that was already asked.
4. Keep the question purely yes/no - avoid "how", "why", "what", etc.

Respond with only the question, nothing else."""

    def _build_readiness_prompt(self, history: History) -> str:
        return f"""You are playing 20 Questions as the guesser.

Questions and answers so far:
{format_history(history)}

Are you confident enough to make a final guess right now, or should you keep asking?
Only say ready if the answers point to one specific thing.

Respond ONLY with JSON: {{"ready": true}} or {{"ready": false}}"""


def _already_asked(question: str, asked: Sequence[str]) -> bool:
    key = question.strip().lower()
    return any(key == previous.strip().lower() for previous in asked)
