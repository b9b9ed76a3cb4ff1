"""Shared normalization helpers for configuration values and model output fields."""

from __future__ import annotations

import math


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})

KNOWN_REGISTERS = ("formal", "literary", "neutral", "casual", "colloquial", "vulgar")
DEFAULT_DIFFICULTY = 2
_MIN_DIFFICULTY = 1
_MAX_DIFFICULTY = 5


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_required_boolean(value: str, field_name: str) -> bool:
    """Parse a required boolean value from accepted textual tokens.

    Raises:
        ValueError: If the token is not one of the accepted boolean values.
    """

    parsed = parse_permissive_boolean(value)
    if parsed is not None:
        return parsed

    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


def normalize_register(value: object) -> str:
    """Map a free-form register label onto one of the known registers.

    Unrecognized labels collapse to `neutral`.
    """

    token = str(value or "").strip().lower()
    if token in KNOWN_REGISTERS:
        return token
    return "neutral"


def normalize_difficulty(value: object) -> int:
    """Coerce a model-provided difficulty into the 1-5 range, defaulting to 2.

    Non-numeric, empty, and non-finite values (`NaN`, `Infinity`, `"1e999"`)
    fall back to the default.
    """

    if isinstance(value, bool) or value is None:
        return DEFAULT_DIFFICULTY
    if isinstance(value, int):
        parsed = value
    else:
        if isinstance(value, float):
            number = value
        else:
            normalized = normalize_optional_string(value)
            if normalized is None:
                return DEFAULT_DIFFICULTY
            try:
                number = float(normalized)
            except ValueError:
                return DEFAULT_DIFFICULTY
        if not math.isfinite(number):
            return DEFAULT_DIFFICULTY
        parsed = int(number)
    return max(_MIN_DIFFICULTY, min(_MAX_DIFFICULTY, parsed))


def bounded_excerpt(text: str, limit: int = 800) -> str:
    """Return at most `limit` characters of `text`, marking truncation with an ellipsis."""

    if len(text) <= limit:
        return text
    return f"{text[:limit]}…"
