"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
job progress lines, and usage summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import ApiError, PipelineStageError
from .models.datatypes import SegmentStage, TranslationJob, Usage

_STAGE_GLYPHS = {
    SegmentStage.PENDING: ".",
    SegmentStage.READY: "+",
    SegmentStage.ERROR: "x",
}


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    elif isinstance(exc, ApiError):
        typer.secho(
            f"{command_name} failed ({exc.failure_kind}): {exc}",
            fg=typer.colors.RED,
            err=True,
        )
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def format_job_progress(job: TranslationJob) -> str:
    """Return one compact progress line for a job snapshot.

    Each segment renders as two glyphs (base, spans): `.` pending, `+` ready,
    `x` error.
    """

    cells = " ".join(
        f"{_STAGE_GLYPHS[segment.base_stage]}{_STAGE_GLYPHS[segment.span_stage]}"
        for segment in job.segments
    )
    done = sum(1 for segment in job.segments if segment.span_stage is SegmentStage.READY)
    variants = sum(segment.variant_count for segment in job.segments)
    return (
        f"[progress] job={job.id} {done}/{len(job.segments)} "
        f"variants={variants} [{cells}]"
    )


def echo_usage_summary(usage: Usage) -> None:
    """Print aggregate token usage for a finished job."""

    typer.echo(f"Tokens in: {usage.input_tokens}")
    typer.echo(f"Tokens out: {usage.output_tokens}")
    typer.echo(f"Tokens total: {usage.total_tokens}")
