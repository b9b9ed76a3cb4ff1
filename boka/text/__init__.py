"""Text preprocessing components.

This package provides deterministic sentence segmentation used before the
LLM translation rounds.
"""

from .segmenter import split_into_segments

__all__ = ["split_into_segments"]
