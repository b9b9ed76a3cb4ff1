"""LLM-facing abstractions for the translation rounds.

This package defines prompt builders, the provider capability contract, the
two concrete provider clients, and resilient parsing of model output.
"""

from .anthropic_client import AnthropicClient
from .json_extract import load_model_json, parse_planned_blocks, parse_variants
from .openai_compat import OpenAICompatClient
from .provider import ChatProviderBase, TranslationProvider

__all__ = [
    "AnthropicClient",
    "ChatProviderBase",
    "OpenAICompatClient",
    "TranslationProvider",
    "load_model_json",
    "parse_planned_blocks",
    "parse_variants",
]
