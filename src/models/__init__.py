"""Model provider abstractions for LLM clients."""

from models.api_client import APILLMClient
from models.base import LLMClient, UnavailableLLMClient, UpstreamFailure
from models.langchain_client import (
    LangChainLLMClient,
    create_ollama_llm_client,
    create_openai_llm_client,
)
from models.registry import ModelProviderRegistry

__all__ = [
    "APILLMClient",
    "LLMClient",
    "UnavailableLLMClient",
    "UpstreamFailure",
    "LangChainLLMClient",
    "create_ollama_llm_client",
    "create_openai_llm_client",
    "ModelProviderRegistry",
]
