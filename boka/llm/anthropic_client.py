"""Hosted-vendor (Anthropic Messages API) provider client."""

from __future__ import annotations

import json
from typing import Any

from ..config import ANTHROPIC_DEFAULT_MODEL, ApiConfig
from ..errors import NoApiKeyError, ParseError
from ..models.datatypes import Usage
from ..parsing import bounded_excerpt, normalize_optional_string
from .http_client import JsonHttpClient
from .provider import ChatProviderBase

API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"


class AnthropicClient(ChatProviderBase):
    """Provider client for the fixed Anthropic Messages endpoint."""

    def __init__(self, config: ApiConfig, http: JsonHttpClient | None = None) -> None:
        """Resolve credentials and model; raise `NoApiKeyError` when no key is set."""

        super().__init__(config)
        api_key = normalize_optional_string(config.provider.api_key)
        if api_key is None:
            raise NoApiKeyError("anthropic")
        self.api_key = api_key
        self.model = normalize_optional_string(config.provider.model) or ANTHROPIC_DEFAULT_MODEL
        self.http = http if http is not None else JsonHttpClient()

    @property
    def api_url(self) -> str:
        return API_URL

    def _complete(self, system: str, user: str, max_tokens: int) -> tuple[str, Usage]:
        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }
        response = self.http.post_json(
            API_URL,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": API_VERSION,
            },
            payload=payload,
        )
        return self._extract_text(response), self._extract_usage(response)

    @staticmethod
    def _extract_text(response: dict[str, Any]) -> str:
        """Concatenate every text content block and trim the result.

        Raises:
            ParseError: If the response envelope carries no `content` block list.
        """

        blocks = response.get("content")
        if not isinstance(blocks, list):
            raise ParseError(
                "response missing `content` blocks",
                excerpt=bounded_excerpt(json.dumps(response, ensure_ascii=False)),
            )
        parts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        ]
        return "".join(parts).strip()

    @staticmethod
    def _extract_usage(response: dict[str, Any]) -> Usage:
        usage = response.get("usage")
        if not isinstance(usage, dict):
            return Usage()
        input_tokens = usage.get("input_tokens")
        output_tokens = usage.get("output_tokens")
        if not isinstance(input_tokens, int) or not isinstance(output_tokens, int):
            return Usage()
        return Usage(input_tokens=input_tokens, output_tokens=output_tokens)
