"""Unit tests for provider clients over a mocked requests transport."""

from __future__ import annotations

import json
from typing import Any

import pytest

from boka.config import ApiConfig, ProviderConfig, ProviderPreset
from boka.errors import (
    ApiResponseError,
    NoApiKeyError,
    ParseError,
    ProviderConfigError,
    TransportError,
)
from boka.llm import http_client
from boka.llm.anthropic_client import API_URL, API_VERSION, AnthropicClient
from boka.llm.openai_compat import OpenAICompatClient
from boka.llm.provider import BASE_TRANSLATION_MAX_TOKENS, CONNECTION_TEST_MAX_TOKENS
from boka.models.datatypes import StaticSegment, SwappableSegment, Usage


class _MockRequestsResponse:
    """Minimal requests response mock for HTTP transport patching."""

    def __init__(self, *, payload: bytes, status_code: int = 200) -> None:
        self.content = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise HTTPError when the response status represents a failure."""

        if self.status_code >= 400:
            raise http_client.requests.HTTPError(
                f"HTTP {self.status_code} error",
                response=self,
            )


class _RecordingPost:
    """Callable replacing `requests.post` that records calls and replays a payload."""

    def __init__(self, body: dict[str, Any] | bytes, status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.calls: list[dict[str, Any]] = []

    def __call__(self, url: str, **kwargs: Any) -> _MockRequestsResponse:
        self.calls.append({"url": url, **kwargs})
        payload = self.body if isinstance(self.body, bytes) else json.dumps(self.body).encode("utf-8")
        return _MockRequestsResponse(payload=payload, status_code=self.status_code)


def _anthropic_config(**provider_overrides: Any) -> ApiConfig:
    provider = ProviderConfig(preset=ProviderPreset.ANTHROPIC, **provider_overrides)
    return ApiConfig(provider=provider, target_language="fr")


def _anthropic_body(text: str, input_tokens: int = 11, output_tokens: int = 4) -> dict[str, Any]:
    return {
        "content": [{"type": "text", "text": text}],
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


def test_anthropic_client_requires_api_key() -> None:
    with pytest.raises(NoApiKeyError, match="No API key set for provider: anthropic"):
        AnthropicClient(_anthropic_config(api_key="  "))


def test_anthropic_base_translation_request_shape_and_usage(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The hosted client should send its auth headers and return trimmed text plus usage."""

    post = _RecordingPost(_anthropic_body("  Bonjour.  "))
    monkeypatch.setattr("boka.llm.http_client.requests.post", post)

    client = AnthropicClient(_anthropic_config(api_key="key-1"))
    text, usage = client.translate_base_segment("Hello. Bye.", "Hello.")

    assert text == "Bonjour."
    assert usage == Usage(input_tokens=11, output_tokens=4)
    call = post.calls[0]
    assert call["url"] == API_URL
    assert call["headers"]["x-api-key"] == "key-1"
    assert call["headers"]["anthropic-version"] == API_VERSION
    assert call["json"]["max_tokens"] == BASE_TRANSLATION_MAX_TOKENS
    assert call["json"]["model"] == "claude-sonnet-4-20250514"
    assert "French" in call["json"]["system"]
    assert call["json"]["messages"][0]["content"].endswith("SEGMENT TO TRANSLATE:\nHello.")


def test_anthropic_plan_parses_fenced_block(monkeypatch: pytest.MonkeyPatch) -> None:
    body = _anthropic_body(
        '```json\n[{"id": "b1", "segments": [{"type": "static", "text": "Il "},'
        ' {"type": "swappable", "id": "s1", "variants": [{"text": "pleut"},]}]}]\n```'
    )
    monkeypatch.setattr("boka.llm.http_client.requests.post", _RecordingPost(body))

    block, _usage = AnthropicClient(_anthropic_config(api_key="k")).plan_block_from_base(
        "Il pleut."
    )

    assert isinstance(block.segments[0], StaticSegment)
    assert isinstance(block.segments[1], SwappableSegment)


def test_plan_with_empty_block_array_is_parse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("boka.llm.http_client.requests.post", _RecordingPost(_anthropic_body("[]")))

    with pytest.raises(ParseError, match="No block returned"):
        AnthropicClient(_anthropic_config(api_key="k")).plan_block_from_base("Il pleut.")


def test_missing_usage_reports_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "boka.llm.http_client.requests.post",
        _RecordingPost({"content": [{"type": "text", "text": "OK"}]}),
    )

    _text, usage = AnthropicClient(_anthropic_config(api_key="k"))._complete("s", "u", 1)

    assert usage == Usage()


def test_http_error_status_maps_to_api_response_error(monkeypatch: pytest.MonkeyPatch) -> None:
    post = _RecordingPost(b'{"error": "invalid x-api-key"}', status_code=401)
    monkeypatch.setattr("boka.llm.http_client.requests.post", post)

    with pytest.raises(ApiResponseError) as exc_info:
        AnthropicClient(_anthropic_config(api_key="k")).test_connection()

    assert exc_info.value.status == 401
    assert "invalid x-api-key" in exc_info.value.body
    assert str(exc_info.value).startswith("API returned error: 401")
    assert post.calls[0]["json"]["max_tokens"] == CONNECTION_TEST_MAX_TOKENS


def test_transport_failures_map_to_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _refused(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        raise http_client.requests.ConnectionError("connection refused by sk-abcdefghijkl")

    monkeypatch.setattr("boka.llm.http_client.requests.post", _refused)

    with pytest.raises(TransportError) as exc_info:
        AnthropicClient(_anthropic_config(api_key="k")).test_connection()

    assert exc_info.value.failure_kind == "transport"
    assert "connection refused" in str(exc_info.value)
    assert "sk-abcdefghijkl" not in str(exc_info.value)


def test_timeouts_are_classified(monkeypatch: pytest.MonkeyPatch) -> None:
    def _slow(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        raise http_client.requests.Timeout("read timed out")

    monkeypatch.setattr("boka.llm.http_client.requests.post", _slow)

    with pytest.raises(TransportError) as exc_info:
        AnthropicClient(_anthropic_config(api_key="k")).test_connection()

    assert exc_info.value.failure_kind == "timeout"


def test_non_json_success_body_is_parse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("boka.llm.http_client.requests.post", _RecordingPost(b"<html>oops</html>"))

    with pytest.raises(ParseError, match="invalid JSON response body"):
        AnthropicClient(_anthropic_config(api_key="k")).test_connection()


def test_anthropic_success_body_without_content_blocks_is_parse_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A 200 body lacking the `content` list should fail instead of yielding empty text."""

    monkeypatch.setattr(
        "boka.llm.http_client.requests.post",
        _RecordingPost({"type": "error", "oops": True}),
    )

    with pytest.raises(ParseError, match="response missing `content` blocks") as exc_info:
        AnthropicClient(_anthropic_config(api_key="k")).translate_base_segment(
            "Hello.", "Hello."
        )

    assert exc_info.value.excerpt is not None
    assert '"oops": true' in exc_info.value.excerpt


def test_openai_compat_uses_preset_defaults_without_auth_for_local_presets(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    post = _RecordingPost(
        {
            "choices": [{"message": {"content": " Hola. "}}],
            "usage": {"prompt_tokens": 7, "completion_tokens": 2},
        }
    )
    monkeypatch.setattr("boka.llm.http_client.requests.post", post)

    client = OpenAICompatClient(ApiConfig(provider=ProviderConfig(preset=ProviderPreset.OLLAMA)))
    text, usage = client.translate_base_segment("Hello.", "Hello.")

    assert text == "Hola."
    assert usage == Usage(input_tokens=7, output_tokens=2)
    call = post.calls[0]
    assert call["url"] == "http://localhost:11434/v1/chat/completions"
    assert "Authorization" not in call["headers"]
    assert call["json"]["model"] == "llama3.1"
    assert [message["role"] for message in call["json"]["messages"]] == ["system", "user"]


def test_openai_compat_sends_bearer_and_strips_base_url_slash(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    post = _RecordingPost({"choices": []})
    monkeypatch.setattr("boka.llm.http_client.requests.post", post)

    client = OpenAICompatClient(
        ApiConfig(
            provider=ProviderConfig(
                preset=ProviderPreset.CUSTOM,
                api_key="secret",
                base_url="https://llm.example.test/v1/",
                model="house-model",
            )
        )
    )
    text, usage = client._complete("s", "u", 5)

    assert text == ""
    assert usage == Usage()
    assert client.chat_completions_url == "https://llm.example.test/v1/chat/completions"
    assert post.calls[0]["headers"]["Authorization"] == "Bearer secret"


def test_openai_compat_construction_errors() -> None:
    """Missing base URL, model, or required key should fail before any request."""

    with pytest.raises(ProviderConfigError, match="baseUrl is required"):
        OpenAICompatClient(ApiConfig(provider=ProviderConfig(preset=ProviderPreset.CUSTOM)))

    with pytest.raises(ProviderConfigError, match="model is required"):
        OpenAICompatClient(
            ApiConfig(
                provider=ProviderConfig(
                    preset=ProviderPreset.CUSTOM, base_url="http://localhost:9000/v1"
                )
            )
        )

    with pytest.raises(NoApiKeyError, match="No API key set for provider: openai"):
        OpenAICompatClient(ApiConfig(provider=ProviderConfig(preset=ProviderPreset.OPENAI)))

    with pytest.raises(NoApiKeyError, match="openrouter"):
        OpenAICompatClient(ApiConfig(provider=ProviderConfig(preset=ProviderPreset.OPENROUTER)))
