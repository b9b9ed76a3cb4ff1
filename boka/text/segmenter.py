"""Sentence-like segmentation of raw story text.

Splits on `.`, `!`, and `?` while keeping each delimiter attached to the
sentence it terminates.
"""

from __future__ import annotations

import re

_SENTENCE_PATTERN = re.compile(r"[^.!?]*[.!?]|[^.!?]+$")


def split_into_segments(text: str) -> list[str]:
    """Split story text into trimmed, non-empty sentence-like segments.

    Args:
        text: Raw story text.

    Returns:
        Ordered segments. Input without terminal punctuation yields one segment
        equal to the trimmed input; empty or whitespace-only input yields `[]`.
    """

    stripped = text.strip()
    if not stripped:
        return []

    segments = [
        piece.strip()
        for piece in _SENTENCE_PATTERN.findall(stripped)
        if piece.strip()
    ]
    if segments:
        return segments
    return [stripped]
