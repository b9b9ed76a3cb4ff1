"""Core datatypes shared across Boka modules.

Responsibilities:
- Represent the job/segment progress model observed by hosts.
- Represent the planned intermediate structure parsed from model output.
- Represent the render-ready interactive document and its host payload form.

Key types:
- `TranslationJob`, `TranslationSegment`, `SegmentStage`
- `PlannedBlock`, `StaticSegment`, `SwappableSegment`, `PlannedSpan`, `PlannedVariant`
- `InteractiveDoc`, `TextToken`, `SpanToken`, `Span`, `Variant`
- `Usage`, `TranslationResult`
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class SegmentStage(str, Enum):
    """Progress state of one pipeline round for a segment."""

    PENDING = "pending"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Usage:
    """Token usage reported by one provider call."""

    input_tokens: int = 0
    output_tokens: int = 0

    def __add__(self, other: Usage) -> Usage:
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(slots=True)
class TranslationSegment:
    """One sentence-like unit of the source story and its round progress.

    Attributes:
        id: Stable identifier (`seg-<n>`, 1-based).
        source: Source sentence text.
        base_text: Base translation once round 1 succeeded.
        base_stage: Round 1 progress.
        span_stage: Rounds 2-3 progress.
        variant_count: Variants generated so far across this segment's spans.
    """

    id: str
    source: str
    base_text: str | None = None
    base_stage: SegmentStage = SegmentStage.PENDING
    span_stage: SegmentStage = SegmentStage.PENDING
    variant_count: int = 0

    def advance_base(self, stage: SegmentStage) -> None:
        """Move `base_stage` forward; stages never return to pending or flip outcome."""

        self.base_stage = _advance(self.base_stage, stage, "base_stage")

    def advance_span(self, stage: SegmentStage) -> None:
        """Move `span_stage` forward; stages never return to pending or flip outcome."""

        self.span_stage = _advance(self.span_stage, stage, "span_stage")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "baseStage": self.base_stage.value,
            "spanStage": self.span_stage.value,
            "variantCount": self.variant_count,
        }
        if self.base_text is not None:
            payload["baseText"] = self.base_text
        return payload


def _advance(current: SegmentStage, target: SegmentStage, field_name: str) -> SegmentStage:
    if current == target:
        return current
    if current is not SegmentStage.PENDING or target is SegmentStage.PENDING:
        raise ValueError(f"`{field_name}` cannot move from {current.value} to {target.value}.")
    return target


@dataclass(slots=True)
class TranslationJob:
    """Ordered segment progress for one translation job."""

    id: str
    segments: list[TranslationSegment] = field(default_factory=list)
    ready: bool = False

    def snapshot(self) -> TranslationJob:
        """Return an independent copy safe to hand to observers."""

        return copy.deepcopy(self)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "segments": [segment.to_payload() for segment in self.segments],
            "ready": self.ready,
        }


@dataclass(frozen=True, slots=True)
class PlannedVariant:
    """One phrasing option as returned by the model (register not yet normalized)."""

    text: str
    register: str = ""
    note: str = ""
    difficulty: int = 2


@dataclass(slots=True)
class PlannedSpan:
    """A swappable unit; seeded with the neutral anchor, later replaced wholesale."""

    id: str
    variants: list[PlannedVariant] = field(default_factory=list)

    @property
    def anchor_text(self) -> str:
        """Return the seed variant text, or an empty string when none survived."""

        if not self.variants:
            return ""
        return self.variants[0].text


@dataclass(frozen=True, slots=True)
class StaticSegment:
    """Fixed text inside a planned block."""

    text: str


@dataclass(slots=True)
class SwappableSegment:
    """Swappable span inside a planned block."""

    span: PlannedSpan


PlannedSegment = Union[StaticSegment, SwappableSegment]


@dataclass(slots=True)
class PlannedBlock:
    """Planned interactive structure for one source segment."""

    id: str
    segments: list[PlannedSegment] = field(default_factory=list)

    def copy(self) -> PlannedBlock:
        return copy.deepcopy(self)


@dataclass(frozen=True, slots=True)
class Variant:
    """Render-form variant with a document-unique identifier."""

    id: str
    register: str
    text: str
    note: str | None = None
    difficulty: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "register": self.register,
            "text": self.text,
        }
        if self.note is not None:
            payload["note"] = self.note
        if self.difficulty is not None:
            payload["difficulty"] = self.difficulty
        return payload


@dataclass(slots=True)
class Span:
    """Render-form span; `active_variant_index` is UI state and always 0 on emission."""

    id: str
    source_text: str
    variants: list[Variant] = field(default_factory=list)
    active_variant_index: int = 0

    @property
    def active_variant(self) -> Variant | None:
        if not self.variants:
            return None
        return self.variants[self.active_variant_index]

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sourceText": self.source_text,
            "variants": [variant.to_payload() for variant in self.variants],
            "activeVariantIndex": self.active_variant_index,
        }


@dataclass(frozen=True, slots=True)
class TextToken:
    """Literal text in the document token stream."""

    value: str

    def to_payload(self) -> dict[str, Any]:
        return {"type": "text", "value": self.value}


@dataclass(frozen=True, slots=True)
class SpanToken:
    """Reference to a span in the document span map."""

    span_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"type": "span", "spanId": self.span_id}


DocToken = Union[TextToken, SpanToken]


@dataclass(slots=True)
class InteractiveDoc:
    """Render-ready document: ordered tokens plus a span lookup."""

    tokens: list[DocToken] = field(default_factory=list)
    spans: dict[str, Span] = field(default_factory=dict)

    def render_text(self) -> str:
        """Render the document as plain text using each span's active variant."""

        parts: list[str] = []
        for token in self.tokens:
            if isinstance(token, TextToken):
                parts.append(token.value)
                continue
            span = self.spans.get(token.span_id)
            variant = span.active_variant if span is not None else None
            parts.append(variant.text if variant is not None else "")
        return "".join(parts)

    def to_payload(self) -> dict[str, Any]:
        return {
            "tokens": [token.to_payload() for token in self.tokens],
            "spans": {span_id: span.to_payload() for span_id, span in self.spans.items()},
        }


@dataclass(slots=True)
class TranslationResult:
    """Terminal output of a successful job."""

    job: TranslationJob
    doc: InteractiveDoc
    usage: Usage = field(default_factory=Usage)
