"""Unit tests for document assembly from planned blocks."""

from __future__ import annotations

from boka.models.datatypes import (
    PlannedBlock,
    PlannedSpan,
    PlannedVariant,
    SpanToken,
    StaticSegment,
    SwappableSegment,
    TextToken,
)
from boka.pipeline.assembler import BLOCK_SEPARATOR, build_doc_from_blocks


def _swappable(*variants: PlannedVariant) -> SwappableSegment:
    return SwappableSegment(span=PlannedSpan(id="s1", variants=list(variants)))


def test_static_only_blocks_have_no_spans_and_separators_between_blocks() -> None:
    """N blocks should produce N-1 separators and no spans when nothing is swappable."""

    blocks = [
        PlannedBlock(id="b1", segments=[StaticSegment(text="Un.")]),
        PlannedBlock(id="b2", segments=[StaticSegment(text="Deux.")]),
        PlannedBlock(id="b3", segments=[StaticSegment(text="Trois.")]),
    ]

    doc = build_doc_from_blocks(blocks)

    assert doc.spans == {}
    separators = [token for token in doc.tokens if token == TextToken(value=BLOCK_SEPARATOR)]
    assert len(separators) == 2
    assert doc.render_text() == "Un.\n\nDeux.\n\nTrois."


def test_empty_static_text_is_not_emitted() -> None:
    doc = build_doc_from_blocks([PlannedBlock(id="b1", segments=[StaticSegment(text="")])])

    assert doc.tokens == []


def test_span_ids_are_numbered_document_wide() -> None:
    """Span ids should keep counting across blocks, not restart per block."""

    blocks = [
        PlannedBlock(id="b1", segments=[_swappable(PlannedVariant(text="a"))]),
        PlannedBlock(
            id="b1",
            segments=[
                StaticSegment(text="x "),
                _swappable(PlannedVariant(text="b")),
                _swappable(PlannedVariant(text="c")),
            ],
        ),
    ]

    doc = build_doc_from_blocks(blocks)

    assert list(doc.spans) == ["span-1", "span-2", "span-3"]
    span_tokens = [token.span_id for token in doc.tokens if isinstance(token, SpanToken)]
    assert span_tokens == ["span-1", "span-2", "span-3"]


def test_variant_ids_are_unique_with_repeated_registers() -> None:
    """Repeated registers inside one span should still yield unique variant ids."""

    block = PlannedBlock(
        id="b1",
        segments=[
            _swappable(
                PlannedVariant(text="il pleut", register="neutral"),
                PlannedVariant(text="il flotte", register="casual"),
                PlannedVariant(text="ça tombe", register="casual"),
                PlannedVariant(text="il pleut fort", register="NEUTRAL"),
            )
        ],
    )

    doc = build_doc_from_blocks([block])
    variant_ids = [variant.id for variant in doc.spans["span-1"].variants]

    assert variant_ids == [
        "span-1-neutral",
        "span-1-casual",
        "span-1-casual-2",
        "span-1-neutral-3",
    ]
    assert len(set(variant_ids)) == len(variant_ids)


def test_unknown_register_normalizes_to_neutral_and_blank_note_is_dropped() -> None:
    block = PlannedBlock(
        id="b1",
        segments=[
            _swappable(PlannedVariant(text="yo", register="street", note="  ", difficulty=4))
        ],
    )

    span = build_doc_from_blocks([block]).spans["span-1"]

    assert span.variants[0].register == "neutral"
    assert span.variants[0].note is None
    assert span.variants[0].difficulty == 4
    assert span.to_payload()["variants"][0] == {
        "id": "span-1-neutral",
        "register": "neutral",
        "text": "yo",
        "difficulty": 4,
    }


def test_span_source_text_is_first_variant_and_active_index_zero() -> None:
    block = PlannedBlock(
        id="b1",
        segments=[
            _swappable(
                PlannedVariant(text="bonjour", register="neutral"),
                PlannedVariant(text="salut", register="casual"),
            ),
            _swappable(),
        ],
    )

    doc = build_doc_from_blocks([block])

    assert doc.spans["span-1"].source_text == "bonjour"
    assert doc.spans["span-1"].active_variant_index == 0
    assert doc.spans["span-2"].source_text == ""
    assert doc.spans["span-2"].variants == []


def test_assembly_does_not_mutate_input_blocks() -> None:
    block = PlannedBlock(id="b1", segments=[_swappable(PlannedVariant(text="a", register="odd"))])

    build_doc_from_blocks([block])

    swappable = block.segments[0]
    assert isinstance(swappable, SwappableSegment)
    assert swappable.span.variants[0].register == "odd"
