"""Base interfaces for model providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class UpstreamFailure(RuntimeError):
    """An LLM call failed or returned content that could not be used."""

    code = "upstream_failure"


class LLMClient(ABC):
    @abstractmethod
    async def agenerate(self, prompt: str, **params) -> str:
        ...


class UnavailableLLMClient(LLMClient):
    """Stand-in for a provider that has no credentials configured."""

    def __init__(self, provider: str, reason: str = "missing credentials"):
        self.provider = provider
        self.reason = reason

    async def agenerate(self, prompt: str, **params) -> str:
        raise UpstreamFailure(f"LLM provider '{self.provider}' unavailable: {self.reason}")
