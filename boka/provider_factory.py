"""Provider factory for the translation pipeline.

Responsibilities:
- Resolve a provider preset to its concrete client implementation.
- Apply the hosted-vendor environment fallbacks (`ANTHROPIC_API_KEY`, default model).
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

import os
from dataclasses import replace
from typing import Mapping

from .config import ANTHROPIC_DEFAULT_MODEL, ApiConfig, ProviderPreset
from .llm.anthropic_client import AnthropicClient
from .llm.openai_compat import OpenAICompatClient
from .llm.provider import ChatProviderBase
from .parsing import normalize_optional_string

ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"


class ProviderFactory:
    """Factory for provider clients used by the pipeline and host service."""

    @staticmethod
    def create_provider(
        config: ApiConfig,
        env: Mapping[str, str] | None = None,
    ) -> ChatProviderBase:
        """Create a provider client for the configured preset.

        Raises:
            NoApiKeyError: When the preset requires a key and none resolves.
            ProviderConfigError: When a generic preset lacks a base URL or model.
        """

        if config.provider.preset is ProviderPreset.ANTHROPIC:
            return AnthropicClient(ProviderFactory._with_anthropic_fallbacks(config, env))
        return OpenAICompatClient(config)

    @staticmethod
    def _with_anthropic_fallbacks(
        config: ApiConfig,
        env: Mapping[str, str] | None,
    ) -> ApiConfig:
        """Fill a blank API key from the environment and a blank model from the default."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        provider = config.provider
        api_key = normalize_optional_string(provider.api_key)
        if api_key is None:
            api_key = normalize_optional_string(env_map.get(ANTHROPIC_API_KEY_ENV))
        model = normalize_optional_string(provider.model) or ANTHROPIC_DEFAULT_MODEL
        return replace(config, provider=replace(provider, api_key=api_key, model=model))
