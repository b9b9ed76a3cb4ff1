"""Boka pipeline package.

This package contains the per-job orchestrator, the document assembler, and
the host-facing job service.
"""

from .assembler import build_doc_from_blocks
from .orchestrator import TranslationArgs, TranslationPipeline, run_translation
from .service import TranslationService, describe_provider

__all__ = [
    "TranslationArgs",
    "TranslationPipeline",
    "TranslationService",
    "build_doc_from_blocks",
    "describe_provider",
    "run_translation",
]
