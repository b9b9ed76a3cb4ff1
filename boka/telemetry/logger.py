"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic round-level runtime logs for translation jobs.
- Keep payloads and secrets out of log lines; only identifiers and error types.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic phase logs for observable translation job activity."""

    def __init__(self, sink: TextIO | None = None, *, level: str = "INFO") -> None:
        """Bind a loguru sink when one is given; otherwise reuse loguru's handlers."""

        self._handler_id: int | None = None
        if sink is not None:
            self._handler_id = _loguru_logger.add(
                sink, format="{message}", level=level, colorize=False
            )

    @classmethod
    def to_stderr(cls, level: str = "INFO") -> RunLogger:
        """Reset loguru handlers and log plain phase lines to stderr."""

        _loguru_logger.remove()
        return cls(sys.stderr, level=level)

    def close(self) -> None:
        """Detach the sink added by this logger, if any."""

        if self._handler_id is not None:
            _loguru_logger.remove(self._handler_id)
            self._handler_id = None

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start runtime event."""

        self._emit("INFO", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete runtime event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str, **context: object) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type, **context)

    def log_usage(self, stage: str, input_tokens: int, output_tokens: int, **context: object) -> None:
        """Emit per-call token usage at debug level."""

        self._emit(
            "DEBUG",
            "usage",
            stage,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            **context,
        )
