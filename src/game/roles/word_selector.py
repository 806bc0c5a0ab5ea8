"""Secret word selection."""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from pydantic import ValidationError

from game.domain.entities import Category, Difficulty, Word
from game.roles.base import BaseRole, extract_json_object, mentions_word
from models.base import UpstreamFailure

if TYPE_CHECKING:
    from config import AgentsConfig
    from models.base import LLMClient

logger = logging.getLogger(__name__)

DEFAULT_HINTS_PER_WORD = 3

FALLBACK_WORDS: Dict[Category, Dict[Difficulty, List[str]]] = {
    Category.ANIMAL: {
        Difficulty.EASY: ["dog", "cat", "elephant", "horse"],
        Difficulty.MEDIUM: ["penguin", "kangaroo", "octopus"],
        Difficulty.HARD: ["axolotl", "pangolin", "narwhal"],
    },
    Category.PLACE: {
        Difficulty.EASY: ["beach", "school", "hospital"],
        Difficulty.MEDIUM: ["library", "airport", "volcano"],
        Difficulty.HARD: ["lighthouse", "observatory", "catacombs"],
    },
    Category.OBJECT: {
        Difficulty.EASY: ["chair", "book", "car", "computer"],
        Difficulty.MEDIUM: ["bicycle", "piano", "umbrella"],
        Difficulty.HARD: ["metronome", "sextant", "abacus"],
    },
    Category.FOOD: {
        Difficulty.EASY: ["pizza", "apple", "bread"],
        Difficulty.MEDIUM: ["sushi", "pancake", "avocado"],
        Difficulty.HARD: ["kimchi", "saffron", "truffle"],
    },
    Category.PERSON: {
        Difficulty.EASY: ["teacher", "doctor", "firefighter"],
        Difficulty.MEDIUM: ["astronaut", "chef", "pilot"],
        Difficulty.HARD: ["cartographer", "sommelier", "blacksmith"],
    },
    Category.CONCEPT: {
        Difficulty.EASY: ["music", "friendship", "time"],
        Difficulty.MEDIUM: ["gravity", "democracy", "memory"],
        Difficulty.HARD: ["entropy", "irony", "nostalgia"],
    },
}


def synthesize_hints(
    text: str,
    category: Category,
    count: Optional[int] = DEFAULT_HINTS_PER_WORD,
) -> List[str]:
    """Build up to ``count`` hints from the word's spelling alone, or all of them for None."""
    letters = text.replace(" ", "")
    vowels = sum(1 for ch in letters.lower() if ch in "aeiou")
    hints = [
        f"It belongs to the {category.value} category.",
        f"It starts with the letter '{letters[0].upper()}'.",
        f"It is {len(letters)} letters long.",
        f"It ends with the letter '{letters[-1].upper()}'.",
        f"It contains {vowels} vowel(s).",
    ]
    if len(letters) > 1:
        hints.append(f"Its second letter is '{letters[1].upper()}'.")
    return hints[:count]


def fallback_word(
    category: Optional[Category] = None,
    difficulty: Optional[Difficulty] = None,
    hints_per_word: int = DEFAULT_HINTS_PER_WORD,
) -> Word:
    category = category or random.choice(list(Category))
    difficulty = difficulty or Difficulty.MEDIUM
    text = random.choice(FALLBACK_WORDS[category][difficulty])
    return Word(
        text=text,
        category=category,
        difficulty=difficulty,
        hints=tuple(synthesize_hints(text, category, hints_per_word)),
    )


class WordSelector(BaseRole):
    role_name = "word_selector"

    def __init__(
        self,
        llm_client: LLMClient,
        agents_config: Optional[AgentsConfig] = None,
        hints_per_word: int = DEFAULT_HINTS_PER_WORD,
    ):
        super().__init__(llm_client, agents_config)
        self._hints_per_word = hints_per_word

    @property
    def hints_per_word(self) -> int:
        return self._hints_per_word

    async def select(
        self,
        category: Optional[Category] = None,
        difficulty: Optional[Difficulty] = None,
        avoid: Sequence[str] = (),
    ) -> Word:
        category = category or random.choice(list(Category))
        difficulty = difficulty or Difficulty.MEDIUM

        prompt = self._build_prompt(category, difficulty, avoid)
        temperature = (
            self._agents_config.word_selector.temperature if self._agents_config else 0.9
        )

        try:
            response = await self._generate(prompt, temperature=temperature)
            word = self._parse_response(response, category, difficulty)
        except UpstreamFailure as e:
            logger.error("Word selection failed, using fallback table: %s", e)
            return fallback_word(category, difficulty, self._hints_per_word)

        logger.debug("Selected word %r (%s/%s)", word.text, word.category.value, word.difficulty.value)
        return word

    def _build_prompt(
        self,
        category: Category,
        difficulty: Difficulty,
        avoid: Sequence[str],
    ) -> str:
        avoid_text = ""
        if avoid:
            avoid_text = f"Do NOT choose any of these recently used words: {', '.join(avoid)}."

        return f"""Select a random word for a game of 20 Questions.
The word should be in the category: {category.value}.
The difficulty level should be: {difficulty.value}.
{avoid_text}

Choose something specific enough to be guessable through yes/no questions.
Easy words are very common; hard words are less familiar but still fair.

Respond ONLY with JSON in this exact format, no markdown:
{{"word": "the chosen word", "category": "{category.value}", "difficulty": "{difficulty.value}", "hints": ["hint 1", "hint 2", "..."]}}

Provide exactly {self._hints_per_word} hints of increasing specificity. The first hint is vague,
the last one is the most revealing. No hint may contain the word itself."""

    def _parse_response(
        self,
        response: str,
        category: Category,
        difficulty: Difficulty,
    ) -> Word:
        data = extract_json_object(response)

        text = str(data.get("word", "")).strip()
        if not text:
            raise UpstreamFailure("Word selector returned an empty word")

        hints: List[str] = []
        for raw in list(data.get("hints", []) or []) + synthesize_hints(text, category, None):
            hint = str(raw).strip()
            if not hint or mentions_word(hint, text):
                continue
            if hint.lower() in (h.lower() for h in hints):
                continue
            hints.append(hint)
            if len(hints) == self._hints_per_word:
                break

        try:
            return Word(
                text=text,
                category=category,
                difficulty=difficulty,
                hints=tuple(hints),
            )
        except ValidationError as exc:
            raise UpstreamFailure(f"Invalid word payload: {exc}") from exc
