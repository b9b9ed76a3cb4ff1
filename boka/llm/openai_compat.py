"""Generic chat-completions provider client (OpenAI, OpenRouter, Ollama, LM Studio, custom).

Responsibilities:
- Resolve base URL and model from explicit config, then preset defaults.
- Enforce API-key presence for presets that require one.
- Send standard chat-completions requests and extract the first choice text.
"""

from __future__ import annotations

from typing import Any

from ..config import PRESET_DEFAULTS, ApiConfig, PresetDefaults
from ..errors import NoApiKeyError, ProviderConfigError
from ..models.datatypes import Usage
from ..parsing import normalize_optional_string
from .http_client import JsonHttpClient
from .provider import ChatProviderBase


class OpenAICompatClient(ChatProviderBase):
    """Provider client for any OpenAI-compatible `/chat/completions` endpoint."""

    def __init__(self, config: ApiConfig, http: JsonHttpClient | None = None) -> None:
        """Resolve endpoint, model, and credentials before any network call."""

        super().__init__(config)
        provider = config.provider
        defaults = PRESET_DEFAULTS.get(provider.preset, PresetDefaults(base_url=None, model=None))

        base_url = normalize_optional_string(provider.base_url) or defaults.base_url or ""
        base_url = base_url.strip().rstrip("/")
        if not base_url:
            raise ProviderConfigError("OpenAI-compatible baseUrl is required")

        model = normalize_optional_string(provider.model) or defaults.model or ""
        if not model.strip():
            raise ProviderConfigError("OpenAI-compatible model is required")

        api_key = normalize_optional_string(provider.api_key)
        if defaults.requires_api_key and api_key is None:
            raise NoApiKeyError(provider.preset.value)

        self.base_url = base_url
        self.model = model.strip()
        self.api_key = api_key
        self.http = http if http is not None else JsonHttpClient()

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None

    @property
    def chat_completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _complete(self, system: str, user: str, max_tokens: int) -> tuple[str, Usage]:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "max_tokens": max_tokens,
        }
        headers: dict[str, str] = {}
        if self.api_key is not None:
            headers["Authorization"] = f"Bearer {self.api_key}"

        response = self.http.post_json(self.chat_completions_url, headers=headers, payload=payload)
        return self._extract_message_text(response), self._extract_usage(response)

    @staticmethod
    def _extract_message_text(response: dict[str, Any]) -> str:
        """Extract the first choice's message content, or an empty string."""

        choices = response.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            return ""
        message = first_choice.get("message")
        if not isinstance(message, dict):
            return ""
        content = message.get("content")
        if not isinstance(content, str):
            return ""
        return content.strip()

    @staticmethod
    def _extract_usage(response: dict[str, Any]) -> Usage:
        usage = response.get("usage")
        if not isinstance(usage, dict):
            return Usage()
        prompt_tokens = usage.get("prompt_tokens")
        completion_tokens = usage.get("completion_tokens")
        if not isinstance(prompt_tokens, int) or not isinstance(completion_tokens, int):
            return Usage()
        return Usage(input_tokens=prompt_tokens, output_tokens=completion_tokens)
