"""OpenAI-compatible chat completions client over plain HTTP."""

from __future__ import annotations

import logging

import httpx

from .base import LLMClient

logger = logging.getLogger(__name__)


class APILLMClient(LLMClient):
    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        api_key: str = "",
        model_name: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 256,
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(self, prompt: str, params: dict) -> dict:
        return {
            "model": params.get("model", self.model_name),
            "messages": [{"role": "user", "content": prompt}],
            "temperature": params.get("temperature", self.temperature),
            "max_tokens": params.get("max_tokens", self.max_tokens),
            "stream": False,
        }

    async def agenerate(self, prompt: str, **params) -> str:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers=self._get_headers(),
                json=self._payload(prompt, params),
            )
            response.raise_for_status()
            data = response.json()
            choices = data.get("choices", [])
            if choices:
                return choices[0].get("message", {}).get("content", "") or ""
            return ""

