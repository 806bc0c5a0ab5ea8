"""Shared plumbing for the LLM-backed game roles.

Each role (word selector, answerer, questioner, guesser, judge) wraps an
``LLMClient`` and owns its prompt, its parsing and its fallback. Upstream
errors are caught here and surfaced to the role as ``UpstreamFailure`` so
that every role can decide on a deterministic fallback value.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional, Sequence, Tuple, TYPE_CHECKING

from models.base import UpstreamFailure

if TYPE_CHECKING:
    from config import AgentsConfig
    from models.base import LLMClient

logger = logging.getLogger(__name__)

History = Sequence[Tuple[str, str]]

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def format_history(history: History, empty: str = "No questions asked yet.") -> str:
    if not history:
        return empty
    return "\n".join(
        f"Q{i}: {question}\nA{i}: {answer}"
        for i, (question, answer) in enumerate(history, 1)
    )


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE_RE.sub("", text.strip()).strip()


def extract_json_object(text: str) -> Dict[str, Any]:
    match = _JSON_OBJECT_RE.search(strip_code_fences(text))
    if not match:
        raise UpstreamFailure("No JSON object found in model response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise UpstreamFailure(f"Unparseable JSON in model response: {exc}") from exc
    if not isinstance(data, dict):
        raise UpstreamFailure("Model response JSON is not an object")
    return data


def mentions_word(text: str, word: str) -> bool:
    pattern = rf"(?<!\w){re.escape(word.strip().lower())}(?!\w)"
    return re.search(pattern, text.lower()) is not None


def contains_word(text: str, word: str) -> bool:
    """Case-insensitive substring test, so "dogs" contains "dog"."""
    needle = word.strip().lower()
    return bool(needle) and needle in text.lower()


def first_line(text: str) -> str:
    for line in strip_code_fences(text).splitlines():
        line = line.strip().strip('"').strip()
        if line:
            return line
    return ""


class BaseRole:
    role_name = "role"

    def __init__(
        self,
        llm_client: LLMClient,
        agents_config: Optional[AgentsConfig] = None,
    ):
        self._llm_client = llm_client
        self._agents_config = agents_config

    @property
    def llm_client(self) -> LLMClient:
        return self._llm_client

    async def _generate(self, prompt: str, **params) -> str:
        try:
            response = await self._llm_client.agenerate(prompt, **params)
        except UpstreamFailure:
            raise
        except Exception as exc:
            raise UpstreamFailure(f"{self.role_name} LLM call failed: {exc}") from exc

        text = (response or "").strip()
        if not text:
            raise UpstreamFailure(f"{self.role_name} LLM returned an empty response")
        return text
