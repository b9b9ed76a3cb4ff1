"""Resilient decoding of semi-structured model output.

Responsibilities:
- Strip markdown code fences and tolerate trailing commas before `]`/`}`.
- Normalize the accepted response shapes into planned blocks or variants.
- Raise `ParseError` with a bounded excerpt for anything else.

Accepted planning shapes: array of blocks, single block object, or a bare
`{"text": ...}` object (alone or as array item) treated as static text.
Accepted variant shapes: array of variants, `{"variants": [...]}`, or a bare
single-variant object containing `text`.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from ..errors import ParseError
from ..models.datatypes import (
    PlannedBlock,
    PlannedSegment,
    PlannedSpan,
    PlannedVariant,
    StaticSegment,
    SwappableSegment,
)
from ..parsing import bounded_excerpt, normalize_difficulty

_FENCE = "```"
_JSON_FENCE = "```json"


def strip_code_fences(text: str) -> str:
    """Remove leading/trailing triple-backtick fences, with or without a `json` tag."""

    cleaned = text.strip()
    if cleaned.startswith(_JSON_FENCE):
        cleaned = cleaned[len(_JSON_FENCE):]
    elif cleaned.startswith(_FENCE):
        cleaned = cleaned[len(_FENCE):]
    if cleaned.endswith(_FENCE):
        cleaned = cleaned[: -len(_FENCE)]
    return cleaned.strip()


def strip_trailing_commas(text: str) -> str:
    """Drop commas that are followed only by whitespace and a closing bracket or brace.

    Commas inside string literals are kept; escape sequences are honored.
    """

    out: list[str] = []
    in_string = False
    escape = False
    length = len(text)
    index = 0
    while index < length:
        char = text[index]
        if in_string:
            out.append(char)
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            index += 1
            continue

        if char == '"':
            in_string = True
        elif char == ",":
            lookahead = index + 1
            while lookahead < length and text[lookahead].isspace():
                lookahead += 1
            if lookahead < length and text[lookahead] in "]}":
                index += 1
                continue

        out.append(char)
        index += 1
    return "".join(out)


def load_model_json(text: str) -> Any:
    """Decode model output as JSON after fence stripping and trailing-comma repair."""

    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(strip_trailing_commas(cleaned))
    except json.JSONDecodeError as exc:
        raise ParseError(f"JSON parse: {exc}", excerpt=bounded_excerpt(cleaned)) from exc


def parse_planned_blocks(text: str) -> list[PlannedBlock]:
    """Parse round-2 output into planned blocks."""

    value = load_model_json(text)
    excerpt = bounded_excerpt(strip_code_fences(text))

    if isinstance(value, list):
        raw_blocks = value
    elif isinstance(value, dict):
        raw_blocks = [value]
    else:
        raise ParseError("JSON parse: expected array/object", excerpt=excerpt)

    return [_block_from_raw(item, excerpt) for item in raw_blocks]


def parse_variants(text: str) -> list[PlannedVariant]:
    """Parse round-3 output into variants, dropping entries with blank text."""

    value = load_model_json(text)
    excerpt = bounded_excerpt(strip_code_fences(text))

    if isinstance(value, list):
        raw_variants = value
    elif isinstance(value, dict):
        if "variants" in value:
            raw_variants = value["variants"]
            if not isinstance(raw_variants, list):
                raise ParseError("JSON parse: `variants` must be an array", excerpt=excerpt)
        elif "text" in value:
            raw_variants = [value]
        else:
            raise ParseError(
                "JSON parse: expected array/object variant", excerpt=excerpt
            )
    else:
        raise ParseError("JSON parse: expected array/object", excerpt=excerpt)

    variants = [_variant_from_raw(item, excerpt) for item in raw_variants]
    return [variant for variant in variants if variant.text.strip()]


def _block_from_raw(item: Any, excerpt: str) -> PlannedBlock:
    if not isinstance(item, dict):
        raise ParseError("JSON parse: block must be an object", excerpt=excerpt)

    block_id = _optional_text(item.get("id"))
    if "segments" in item:
        raw_segments = item["segments"]
        if raw_segments is None:
            raw_segments = []
        if not isinstance(raw_segments, list):
            raise ParseError("JSON parse: `segments` must be an array", excerpt=excerpt)
        segments = [_segment_from_raw(raw, excerpt) for raw in raw_segments]
        return PlannedBlock(id=block_id, segments=segments)

    text = item.get("text")
    if isinstance(text, str):
        return PlannedBlock(id=block_id, segments=[StaticSegment(text=text)])

    raise ParseError("JSON parse: block missing `segments`", excerpt=excerpt)


def _segment_from_raw(raw: Any, excerpt: str) -> PlannedSegment:
    if not isinstance(raw, dict):
        raise ParseError("JSON parse: segment must be an object", excerpt=excerpt)

    segment_type = _optional_text(raw.get("type"))
    if segment_type == "static":
        return StaticSegment(text=_optional_text(raw.get("text")))
    if segment_type == "swappable":
        raw_variants = raw.get("variants") or []
        if not isinstance(raw_variants, list):
            raise ParseError("JSON parse: `variants` must be an array", excerpt=excerpt)
        variants = [_variant_from_raw(variant, excerpt) for variant in raw_variants]
        return SwappableSegment(span=PlannedSpan(id=_optional_text(raw.get("id")), variants=variants))

    logger.warning(
        "Unknown planned segment type {!r}; degrading to static text.", segment_type
    )
    return StaticSegment(text=_optional_text(raw.get("text")))


def _variant_from_raw(raw: Any, excerpt: str) -> PlannedVariant:
    if not isinstance(raw, dict):
        raise ParseError("JSON parse: variant must be an object", excerpt=excerpt)

    return PlannedVariant(
        text=_optional_text(raw.get("text")),
        register=_optional_text(raw.get("register")),
        note=_optional_text(raw.get("note")),
        difficulty=normalize_difficulty(raw.get("difficulty")),
    )


def _optional_text(value: Any) -> str:
    """Return string values unchanged and treat anything else as empty."""

    if isinstance(value, str):
        return value
    return ""
