"""Token usage accounting for translation jobs.

Responsibilities:
- Accumulate per-call token usage by pipeline round.
- Provide totals for the job result and CLI reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models.datatypes import Usage


@dataclass(slots=True)
class UsageTracker:
    """Collect and summarize token usage per round."""

    by_stage: dict[str, Usage] = field(default_factory=dict)
    calls: int = 0

    def add(self, stage: str, usage: Usage) -> None:
        """Add one provider call's usage under `stage`."""

        self.by_stage[stage] = self.by_stage.get(stage, Usage()) + usage
        self.calls += 1

    @property
    def total(self) -> Usage:
        total = Usage()
        for usage in self.by_stage.values():
            total = total + usage
        return total

    def summary(self) -> dict[str, int]:
        """Return a flat summary dictionary for reporting."""

        total = self.total
        return {
            "calls": self.calls,
            "input_tokens": total.input_tokens,
            "output_tokens": total.output_tokens,
            "total_tokens": total.total_tokens,
        }
