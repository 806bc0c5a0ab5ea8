"""Model provider registry for managing LLM clients per provider."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from config import ConfigLoader, ModelsConfig
from models.api_client import APILLMClient
from models.base import LLMClient, UnavailableLLMClient
from models.langchain_client import create_ollama_llm_client, create_openai_llm_client

logger = logging.getLogger(__name__)


class ModelProviderRegistry:
    def __init__(self, config: Optional[ModelsConfig] = None):
        if config is None:
            loader = ConfigLoader()
            config = loader.load_models_config()
        self._config = config
        self._clients: Dict[str, LLMClient] = {}

    @property
    def config(self) -> ModelsConfig:
        return self._config

    @property
    def provider_names(self) -> List[str]:
        return list(self._config.providers)

    def is_configured(self, provider: str) -> bool:
        if provider not in self._config.providers:
            return False
        return self._config.providers[provider].has_credentials

    def missing_credentials(self) -> List[str]:
        return [name for name in self._config.providers if not self.is_configured(name)]

    def has_any_backend(self) -> bool:
        return any(self.is_configured(name) for name in self._config.providers)

    def get_llm_client(self, provider: Optional[str] = None) -> LLMClient:
        provider = provider or self._config.default_answerer

        if provider in self._clients:
            return self._clients[provider]

        if provider not in self._config.providers:
            logger.warning("Unknown LLM provider '%s', calls will use fallbacks", provider)
            client: LLMClient = UnavailableLLMClient(provider, reason="unknown provider")
        elif not self.is_configured(provider):
            client = UnavailableLLMClient(provider)
        else:
            client = self._create_client(provider)

        self._clients[provider] = client
        return client

    def _create_client(self, provider: str) -> LLMClient:
        cfg = self._config.get_provider_config(provider)

        if cfg.transport == "langchain_ollama":
            client: LLMClient = create_ollama_llm_client(
                base_url=cfg.base_url,
                model_name=cfg.model_name,
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
            )
        elif cfg.transport == "langchain_openai":
            client = create_openai_llm_client(
                base_url=cfg.base_url,
                api_key=cfg.api_key,
                model_name=cfg.model_name,
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
                timeout=cfg.timeout,
            )
        elif cfg.transport == "http":
            client = APILLMClient(
                base_url=cfg.base_url,
                api_key=cfg.api_key,
                model_name=cfg.model_name,
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
                timeout=cfg.timeout,
            )
        else:
            raise ValueError(f"Unsupported transport for provider {provider}: {cfg.transport}")

        logger.info(
            "Initialized LLM client: provider=%s, transport=%s, model=%s",
            provider,
            cfg.transport,
            cfg.model_name,
        )
        return client
