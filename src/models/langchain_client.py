"""LangChain-based LLM clients for the OpenAI and Ollama providers."""

from __future__ import annotations

import logging
from typing import Any, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage

from .base import LLMClient

logger = logging.getLogger(__name__)


def content_text(content: Any) -> str:
    # Some chat models return a list of content parts instead of a string.
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return "" if content is None else str(content)


class LangChainLLMClient(LLMClient):
    def __init__(
        self,
        chat_model: BaseChatModel,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self._chat_model = chat_model
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def chat_model(self) -> BaseChatModel:
        return self._chat_model

    def _bound_model(self, params: dict):
        overrides = {}
        if "temperature" in params:
            overrides["temperature"] = params["temperature"]
        if "max_tokens" in params:
            overrides["max_tokens"] = params["max_tokens"]
        if not overrides:
            return self._chat_model
        return self._chat_model.bind(**overrides)

    async def agenerate(self, prompt: str, **params) -> str:
        messages = [HumanMessage(content=prompt)]
        response = await self._bound_model(params).ainvoke(messages)
        return content_text(response.content)


def create_ollama_llm_client(
    base_url: str = "http://localhost:11434",
    model_name: str = "qwen2.5:7b",
    temperature: float = 0.7,
    max_tokens: int = 256,
    **kwargs,
) -> LangChainLLMClient:
    from langchain_ollama import ChatOllama

    chat_model = ChatOllama(
        base_url=base_url,
        model=model_name,
        temperature=temperature,
        num_predict=max_tokens,
        **kwargs,
    )
    return LangChainLLMClient(chat_model, temperature=temperature, max_tokens=max_tokens)


def create_openai_llm_client(
    base_url: str = "https://api.openai.com/v1",
    api_key: str = "",
    model_name: str = "gpt-4o",
    temperature: float = 0.7,
    max_tokens: int = 256,
    timeout: float = 60.0,
    **kwargs,
) -> LangChainLLMClient:
    from langchain_openai import ChatOpenAI

    chat_model = ChatOpenAI(
        base_url=base_url,
        api_key=api_key or None,
        model=model_name,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
        **kwargs,
    )
    return LangChainLLMClient(chat_model, temperature=temperature, max_tokens=max_tokens)
