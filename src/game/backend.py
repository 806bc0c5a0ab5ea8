"""LLM backend strategy used by the session runner.

The runner never talks to a model client directly. It asks an
``LLMBackend`` for each role operation and passes the ``LLMConfig`` that
says which provider plays the questioner side and which plays the
answerer side. Word selection and judging run on the answerer's provider.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from config import AgentsConfig
from game.domain.entities import Category, Difficulty, LLMConfig, Word
from game.roles import Answerer, GuessJudge, Guesser, History, JudgeResult, Questioner, WordSelector
from game.roles.word_selector import DEFAULT_HINTS_PER_WORD
from models.base import LLMClient
from models.registry import ModelProviderRegistry

logger = logging.getLogger(__name__)


class LLMBackend(ABC):
    @abstractmethod
    async def select_word(
        self,
        category: Optional[Category] = None,
        difficulty: Optional[Difficulty] = None,
        llm_config: Optional[LLMConfig] = None,
        avoid: Sequence[str] = (),
    ) -> Word:
        ...

    @abstractmethod
    async def answer(
        self,
        word: str,
        question: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> str:
        ...

    @abstractmethod
    async def simulate_answer(
        self,
        word: str,
        question: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> str:
        ...

    @abstractmethod
    async def ask_question(
        self,
        word: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> str:
        ...

    @abstractmethod
    async def guess(self, history: History, llm_config: Optional[LLMConfig] = None) -> str:
        ...

    @abstractmethod
    async def judge(
        self,
        word: str,
        guess: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> JudgeResult:
        ...

    @abstractmethod
    async def assess_readiness(
        self,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> bool:
        ...


class DefaultLLMBackend(LLMBackend):
    def __init__(
        self,
        registry: ModelProviderRegistry,
        agents_config: Optional[AgentsConfig] = None,
        hints_per_word: int = DEFAULT_HINTS_PER_WORD,
    ):
        self._registry = registry
        self._agents_config = agents_config or AgentsConfig()
        self._hints_per_word = hints_per_word

    @property
    def registry(self) -> ModelProviderRegistry:
        return self._registry

    def default_llm_config(self) -> LLMConfig:
        models = self._registry.config
        return LLMConfig(
            questioner=models.default_questioner,
            answerer=models.default_answerer,
        )

    def _questioner_client(self, llm_config: Optional[LLMConfig]) -> LLMClient:
        llm_config = llm_config or self.default_llm_config()
        return self._registry.get_llm_client(llm_config.questioner)

    def _answerer_client(self, llm_config: Optional[LLMConfig]) -> LLMClient:
        llm_config = llm_config or self.default_llm_config()
        return self._registry.get_llm_client(llm_config.answerer)

    async def select_word(
        self,
        category: Optional[Category] = None,
        difficulty: Optional[Difficulty] = None,
        llm_config: Optional[LLMConfig] = None,
        avoid: Sequence[str] = (),
    ) -> Word:
        selector = WordSelector(
            self._answerer_client(llm_config),
            self._agents_config,
            hints_per_word=self._hints_per_word,
        )
        return await selector.select(category, difficulty, avoid)

    async def answer(
        self,
        word: str,
        question: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> str:
        answerer = Answerer(self._answerer_client(llm_config), self._agents_config)
        return await answerer.answer(word, question, history)

    async def simulate_answer(
        self,
        word: str,
        question: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> str:
        answerer = Answerer(self._answerer_client(llm_config), self._agents_config)
        return await answerer.answer(word, question, history, simulated=True)

    async def ask_question(
        self,
        word: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> str:
        questioner = Questioner(self._questioner_client(llm_config), self._agents_config)
        return await questioner.generate(word, history)

    async def guess(self, history: History, llm_config: Optional[LLMConfig] = None) -> str:
        guesser = Guesser(self._questioner_client(llm_config), self._agents_config)
        return await guesser.guess(history)

    async def judge(
        self,
        word: str,
        guess: str,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> JudgeResult:
        judge = GuessJudge(self._answerer_client(llm_config), self._agents_config)
        return await judge.judge(word, guess, history)

    async def assess_readiness(
        self,
        history: History,
        llm_config: Optional[LLMConfig] = None,
    ) -> bool:
        questioner = Questioner(self._questioner_client(llm_config), self._agents_config)
        return await questioner.assess_readiness(history)
