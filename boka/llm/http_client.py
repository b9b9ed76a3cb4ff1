"""JSON-over-HTTP transport shared by the provider clients.

Responsibilities:
- Send one JSON POST request per call with a fixed timeout.
- Map transport, HTTP-status, and decoding failures onto the `ApiError` family.
- Keep secrets out of transport error messages.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests

from ..errors import ApiResponseError, ParseError, TransportError
from ..parsing import bounded_excerpt

DEFAULT_TIMEOUT_SECONDS = 60.0


class JsonHttpClient:
    """Minimal requests-based JSON POST client used by every provider."""

    _MAX_TRANSPORT_MESSAGE_CHARS = 180

    def __init__(self, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.timeout_seconds = timeout_seconds

    def post_json(
        self,
        url: str,
        *,
        headers: dict[str, str],
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """POST `payload` to `url` and return the decoded JSON object body."""

        request_headers = {"Content-Type": "application/json", **headers}
        try:
            response = requests.post(
                url,
                headers=request_headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            response_bytes = bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_api_error(exc) from exc
        except (requests.Timeout, socket.timeout, TimeoutError) as exc:
            raise TransportError("HTTP error: request timed out.", failure_kind="timeout") from exc
        except requests.RequestException as exc:
            raise TransportError(
                f"HTTP error: {self._short_message(self._redact_sensitive_tokens(str(exc)))}"
            ) from exc

        return self._decode_object(response_bytes)

    @staticmethod
    def _decode_object(response_bytes: bytes) -> dict[str, Any]:
        """Decode a success body, requiring a top-level JSON object."""

        text = response_bytes.decode("utf-8", errors="replace")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"invalid JSON response body: {exc}", excerpt=bounded_excerpt(text)) from exc
        if not isinstance(payload, dict):
            raise ParseError("response body is not a JSON object", excerpt=bounded_excerpt(text))
        return payload

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        try:
            return bytes(response.content).decode("utf-8", errors="replace").strip()
        except (TypeError, ValueError):
            return ""

    @classmethod
    def _http_error_to_api_error(cls, exc: requests.HTTPError) -> ApiResponseError:
        status_code = exc.response.status_code if exc.response is not None else 0
        return ApiResponseError(status_code, cls._decode_error_body(exc))

    @staticmethod
    def _redact_sensitive_tokens(text: str) -> str:
        """Redact API-key-like tokens from transport error content."""

        redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
        redacted = re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
            "Bearer [redacted-token]",
            redacted,
        )
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap transport message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_TRANSPORT_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_TRANSPORT_MESSAGE_CHARS - 1]}..."
