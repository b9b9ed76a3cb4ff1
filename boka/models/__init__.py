"""Shared typed data models for Boka.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    DocToken,
    InteractiveDoc,
    PlannedBlock,
    PlannedSegment,
    PlannedSpan,
    PlannedVariant,
    SegmentStage,
    Span,
    SpanToken,
    StaticSegment,
    SwappableSegment,
    TextToken,
    TranslationJob,
    TranslationResult,
    TranslationSegment,
    Usage,
    Variant,
)

__all__ = [
    "DocToken",
    "InteractiveDoc",
    "PlannedBlock",
    "PlannedSegment",
    "PlannedSpan",
    "PlannedVariant",
    "SegmentStage",
    "Span",
    "SpanToken",
    "StaticSegment",
    "SwappableSegment",
    "TextToken",
    "TranslationJob",
    "TranslationResult",
    "TranslationSegment",
    "Usage",
    "Variant",
]
