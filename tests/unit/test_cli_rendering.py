"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

import pytest
import typer

from boka.cli_rendering import echo_usage_summary, exit_with_command_error, format_job_progress
from boka.errors import NoApiKeyError, PipelineStageError
from boka.models.datatypes import SegmentStage, TranslationJob, TranslationSegment, Usage


def test_exit_with_command_error_renders_stage_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print stage diagnostics and hint before exiting with code 1."""

    error = PipelineStageError(
        stage="config",
        detail="Config file not found: `missing.yaml`.",
        hint="Provide an existing path via `--config <path.yaml>`.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("translate", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "translate failed at stage `config`" in captured.err
    assert "Hint: Provide an existing path via `--config <path.yaml>`." in captured.err


def test_exit_with_command_error_renders_api_error_kind(
    capsys: pytest.CaptureFixture[str],
) -> None:
    with pytest.raises(typer.Exit):
        exit_with_command_error("test-provider", NoApiKeyError("openai"))

    captured = capsys.readouterr()
    assert (
        "test-provider failed (missing_api_key): No API key set for provider: openai"
        in captured.err
    )


def test_exit_with_command_error_renders_non_stage_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for unexpected failures."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("translate", RuntimeError("unexpected failure"))

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "translate failed: unexpected failure" in captured.err


def test_format_job_progress_renders_stage_glyphs() -> None:
    done = TranslationSegment(id="seg-1", source="A.", variant_count=3)
    done.advance_base(SegmentStage.READY)
    done.advance_span(SegmentStage.READY)
    failed = TranslationSegment(id="seg-2", source="B.")
    failed.advance_base(SegmentStage.READY)
    failed.advance_span(SegmentStage.ERROR)
    pending = TranslationSegment(id="seg-3", source="C.")

    line = format_job_progress(TranslationJob(id="job-1", segments=[done, failed, pending]))

    assert line == "[progress] job=job-1 1/3 variants=3 [++ +x ..]"


def test_echo_usage_summary(capsys: pytest.CaptureFixture[str]) -> None:
    echo_usage_summary(Usage(input_tokens=10, output_tokens=5))

    assert capsys.readouterr().out.splitlines() == [
        "Tokens in: 10",
        "Tokens out: 5",
        "Tokens total: 15",
    ]
