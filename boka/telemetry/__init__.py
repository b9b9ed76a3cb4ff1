"""Telemetry and observability helpers.

This package tracks token usage and round-level run events for translation jobs.
"""

from .logger import RunLogger
from .usage_tracker import UsageTracker

__all__ = ["RunLogger", "UsageTracker"]
