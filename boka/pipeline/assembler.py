"""Document assembly from planned blocks.

Folds planned blocks, in order, into a flat token stream plus a span map.
Span ids are numbered document-wide (`span-1`, `span-2`, ...) so ids stay
stable while later blocks stream in; variant ids derive from the span id and
the normalized register, with the variant index appended for repeated
registers within a span.
"""

from __future__ import annotations

from typing import Iterable

from ..models.datatypes import (
    DocToken,
    InteractiveDoc,
    PlannedBlock,
    PlannedSpan,
    Span,
    SpanToken,
    StaticSegment,
    SwappableSegment,
    TextToken,
    Variant,
)
from ..parsing import normalize_register

BLOCK_SEPARATOR = "\n\n"


def build_doc_from_blocks(blocks: Iterable[PlannedBlock]) -> InteractiveDoc:
    """Build a render-ready document from planned blocks without mutating them."""

    block_list = list(blocks)
    tokens: list[DocToken] = []
    spans: dict[str, Span] = {}
    span_counter = 0

    for block_index, block in enumerate(block_list):
        for segment in block.segments:
            if isinstance(segment, StaticSegment):
                if segment.text:
                    tokens.append(TextToken(value=segment.text))
            elif isinstance(segment, SwappableSegment):
                span_counter += 1
                span = _render_span(f"span-{span_counter}", segment.span)
                spans[span.id] = span
                tokens.append(SpanToken(span_id=span.id))

        if block_index + 1 < len(block_list):
            tokens.append(TextToken(value=BLOCK_SEPARATOR))

    return InteractiveDoc(tokens=tokens, spans=spans)


def _render_span(span_id: str, planned: PlannedSpan) -> Span:
    variants: list[Variant] = []
    seen_registers: set[str] = set()
    for index, planned_variant in enumerate(planned.variants):
        register = normalize_register(planned_variant.register)
        if register in seen_registers:
            variant_id = f"{span_id}-{register}-{index}"
        else:
            variant_id = f"{span_id}-{register}"
            seen_registers.add(register)
        note = planned_variant.note if planned_variant.note.strip() else None
        variants.append(
            Variant(
                id=variant_id,
                register=register,
                text=planned_variant.text,
                note=note,
                difficulty=planned_variant.difficulty,
            )
        )

    source_text = variants[0].text if variants else ""
    return Span(id=span_id, source_text=source_text, variants=variants, active_variant_index=0)
