"""Provider capability contract and the shared three-round implementation.

Responsibilities:
- Define the `TranslationProvider` protocol consumed by the orchestrator.
- Implement the three pipeline rounds once, on top of a single abstract
  chat-completion call that each concrete client supplies.
"""

from __future__ import annotations

from typing import Protocol

from ..config import ApiConfig
from ..errors import ParseError
from ..models.datatypes import PlannedBlock, PlannedVariant, Usage
from . import prompts
from .json_extract import parse_planned_blocks, parse_variants

BASE_TRANSLATION_MAX_TOKENS = 512
SPAN_PLANNING_MAX_TOKENS = 2048
SPAN_VARIANTS_MAX_TOKENS = 2048
CONNECTION_TEST_MAX_TOKENS = 1


class TranslationProvider(Protocol):
    """Protocol for LLM providers driving the three translation rounds."""

    def translate_base_segment(self, full_story: str, segment: str) -> tuple[str, Usage]:
        """Translate one segment using the full story as context."""

    def plan_block_from_base(self, base_text: str) -> tuple[PlannedBlock, Usage]:
        """Split a base translation into static text and seeded swappable spans."""

    def generate_span_variants(
        self, segment_context: str, anchor_phrase: str
    ) -> tuple[list[PlannedVariant], Usage]:
        """Generate register-graded variants for one anchor phrase."""

    def test_connection(self) -> None:
        """Issue a minimal request, raising `ApiError` when the provider is unusable."""


class ChatProviderBase:
    """Three-round provider logic shared by the hosted-vendor and generic clients."""

    def __init__(self, config: ApiConfig) -> None:
        self.config = config

    def _complete(self, system: str, user: str, max_tokens: int) -> tuple[str, Usage]:
        """Send one system+user exchange and return trimmed text plus usage."""

        raise NotImplementedError

    def translate_base_segment(self, full_story: str, segment: str) -> tuple[str, Usage]:
        """Return the round-1 base translation for one segment."""

        system = prompts.base_translation_system_prompt(
            self.config.target_language,
            self.config.source_language,
            self.config.adult_mode,
        )
        user = prompts.base_translation_user_prompt(full_story, segment)
        return self._complete(system, user, BASE_TRANSLATION_MAX_TOKENS)

    def plan_block_from_base(self, base_text: str) -> tuple[PlannedBlock, Usage]:
        """Return the first planned block parsed from the round-2 response."""

        system = prompts.span_planning_system_prompt(
            self.config.target_language,
            self.config.source_language,
            self.config.dense_spans,
        )
        text, usage = self._complete(system, base_text, SPAN_PLANNING_MAX_TOKENS)
        blocks = parse_planned_blocks(text)
        if not blocks:
            raise ParseError("No block returned")
        return blocks[0], usage

    def generate_span_variants(
        self, segment_context: str, anchor_phrase: str
    ) -> tuple[list[PlannedVariant], Usage]:
        """Return the round-3 variants for one anchor phrase."""

        system = prompts.span_variants_system_prompt(
            self.config.target_language,
            self.config.source_language,
            self.config.adult_mode,
        )
        user = prompts.span_variants_user_prompt(segment_context, anchor_phrase)
        text, usage = self._complete(system, user, SPAN_VARIANTS_MAX_TOKENS)
        return parse_variants(text), usage

    def test_connection(self) -> None:
        self._complete(
            prompts.CONNECTION_TEST_SYSTEM_PROMPT,
            prompts.CONNECTION_TEST_USER_PROMPT,
            CONNECTION_TEST_MAX_TOKENS,
        )
