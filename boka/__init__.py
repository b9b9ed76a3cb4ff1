"""Top-level package for Boka.

This package turns source prose into an interactive translation document whose
spans can be swapped between register-graded phrasings. The main entry points
are `run_translation` for a single job and `TranslationService` for hosts that
run several jobs concurrently.
"""

from .pipeline import TranslationArgs, TranslationService, run_translation

__all__ = ["TranslationArgs", "TranslationService", "run_translation", "__version__"]

__version__ = "0.1.0"
