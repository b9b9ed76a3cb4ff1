"""Unit tests for job progress and document datatypes."""

from __future__ import annotations

import pytest

from boka.models.datatypes import (
    InteractiveDoc,
    SegmentStage,
    Span,
    SpanToken,
    TextToken,
    TranslationJob,
    TranslationSegment,
    Usage,
    Variant,
)


def test_segment_stages_only_move_forward() -> None:
    """Stages should leave pending once and never flip between outcomes."""

    segment = TranslationSegment(id="seg-1", source="Hi.")
    segment.advance_base(SegmentStage.READY)
    segment.advance_base(SegmentStage.READY)

    with pytest.raises(ValueError):
        segment.advance_base(SegmentStage.PENDING)
    with pytest.raises(ValueError):
        segment.advance_base(SegmentStage.ERROR)

    segment.advance_span(SegmentStage.ERROR)
    with pytest.raises(ValueError):
        segment.advance_span(SegmentStage.READY)


def test_job_snapshot_is_independent_copy() -> None:
    job = TranslationJob(id="job-1", segments=[TranslationSegment(id="seg-1", source="Hi.")])

    snapshot = job.snapshot()
    job.segments[0].advance_base(SegmentStage.READY)
    job.ready = True

    assert snapshot.segments[0].base_stage is SegmentStage.PENDING
    assert snapshot.ready is False


def test_job_payload_uses_host_field_names() -> None:
    segment = TranslationSegment(id="seg-1", source="Hi.")
    job = TranslationJob(id="job-1", segments=[segment])

    assert job.to_payload() == {
        "id": "job-1",
        "segments": [
            {
                "id": "seg-1",
                "source": "Hi.",
                "baseStage": "pending",
                "spanStage": "pending",
                "variantCount": 0,
            }
        ],
        "ready": False,
    }

    segment.base_text = "Salut."
    assert job.to_payload()["segments"][0]["baseText"] == "Salut."


def test_doc_payload_and_render_text() -> None:
    span = Span(
        id="span-1",
        source_text="Salut",
        variants=[
            Variant(id="span-1-casual", register="casual", text="Salut"),
            Variant(id="span-1-formal", register="formal", text="Bonjour", note="polite"),
        ],
    )
    doc = InteractiveDoc(
        tokens=[SpanToken(span_id="span-1"), TextToken(value=" !")],
        spans={"span-1": span},
    )

    assert doc.render_text() == "Salut !"
    span.active_variant_index = 1
    assert doc.render_text() == "Bonjour !"

    payload = doc.to_payload()
    assert payload["tokens"] == [
        {"type": "span", "spanId": "span-1"},
        {"type": "text", "value": " !"},
    ]
    assert payload["spans"]["span-1"]["sourceText"] == "Salut"
    assert payload["spans"]["span-1"]["variants"][1] == {
        "id": "span-1-formal",
        "register": "formal",
        "text": "Bonjour",
        "note": "polite",
    }


def test_usage_addition_and_total() -> None:
    total = Usage(input_tokens=3, output_tokens=1) + Usage(input_tokens=2, output_tokens=4)

    assert total == Usage(input_tokens=5, output_tokens=5)
    assert total.total_tokens == 10
