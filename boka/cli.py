"""Command-line interface for Boka.

Responsibilities:
- Expose user-facing commands for translation jobs and provider diagnostics.
- Convert CLI arguments into `ApiConfig` via the config precedence layer.
- Manage securely stored provider API keys.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_usage_summary, exit_with_command_error, format_job_progress
from .cli_runtime import resolve_provider_runtime_sources
from .config import ApiConfig, BokaConfig, ConfigLoader, ProviderPreset, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import PipelineStageError
from .models.datatypes import TranslationJob, TranslationResult
from .parsing import normalize_optional_string
from .pipeline import TranslationArgs, describe_provider, run_translation
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="boka",
    no_args_is_help=True,
    help="Boka interactive story translation CLI.",
)

_CLI_JOB_ID = "job-cli"


def _load_yaml_config(config_path: Path | None) -> BokaConfig:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return BokaConfig()

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _read_story(story: str) -> str:
    """Read story text from a file path, or from stdin when `story` is `-`."""

    if story == "-":
        return sys.stdin.read()
    path = Path(story)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PipelineStageError(
            stage="input",
            detail=f"Could not read story file `{path}`: {exc}",
            hint="Pass an existing UTF-8 text file, or `-` to read from stdin.",
        ) from exc


def _preset_hint(provider: str | None, base_config: BokaConfig) -> str:
    """Pick the preset whose stored API key should be consulted."""

    candidate = (
        normalize_optional_string(provider)
        or normalize_optional_string(os.environ.get("BOKA_PROVIDER"))
        or base_config.provider
    )
    try:
        return ProviderPreset.parse(candidate).value
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Pass `--provider` with one of the supported presets.",
        ) from exc


def _resolve_api_config(
    base_config: BokaConfig,
    runtime_cli_values: dict[str, str],
    runtime_secure_values: dict[str, str],
) -> ApiConfig:
    """Resolve the job's `ApiConfig` from base config and runtime sources."""

    sources = RuntimeConfigSources(
        cli=runtime_cli_values,
        secure=runtime_secure_values,
        env=os.environ,
    )
    try:
        return base_config.resolved_api_config(sources)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Check `--provider`, boolean env values, and config file fields.",
        ) from exc


def _write_json_output(path: Path, result: TranslationResult) -> None:
    payload = {"job": result.job.to_payload(), "doc": result.doc.to_payload()}
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as exc:
        raise PipelineStageError(
            stage="output",
            detail=f"Could not write JSON output `{path}`: {exc}",
            hint="Choose a writable path for `--json-out`.",
        ) from exc


def _echo_job_progress(job: TranslationJob) -> None:
    typer.echo(format_job_progress(job))


@app.command("translate")
def translate_command(
    story: Annotated[
        str,
        typer.Argument(help="Path to a UTF-8 story file, or `-` to read stdin."),
    ],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    target_language: Annotated[
        str | None,
        typer.Option("--target", help="Target language code or name (default `fr`)."),
    ] = None,
    source_language: Annotated[
        str | None,
        typer.Option("--source", help="Optional source language code."),
    ] = None,
    adult_mode: Annotated[
        bool | None,
        typer.Option("--adult/--family", help="Allow or forbid vulgar variant registers."),
    ] = None,
    dense_spans: Annotated[
        bool | None,
        typer.Option("--dense/--sparse", help="Plan 3-5 (dense) or 1-2 (sparse) spans."),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option(
            "--provider",
            help="Provider preset: anthropic, openai, openrouter, ollama, lmstudio, custom.",
        ),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", help="Model id override."),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Base URL override for OpenAI-compatible presets."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
        ),
    ] = None,
    prompt_api_key: Annotated[
        bool,
        typer.Option(
            "--prompt-api-key",
            help="Prompt for API key with hidden input (never echoed).",
        ),
    ] = False,
    store_api_key: Annotated[
        bool,
        typer.Option(
            "--store-api-key/--no-store-api-key",
            help="Persist CLI-entered API key to secure credential storage.",
        ),
    ] = False,
    json_out: Annotated[
        Path | None,
        typer.Option("--json-out", help="Write final job and document payloads as JSON."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log per-round phase lines and token usage to stderr."),
    ] = False,
) -> None:
    """Translate a story into an interactive document with swappable spans."""

    run_logger = RunLogger.to_stderr(level="DEBUG" if verbose else "WARNING")
    try:
        story_text = _read_story(story)
        base_config = _load_yaml_config(config_file)
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            _preset_hint(provider, base_config),
            provider=provider,
            model=model,
            base_url=base_url,
            api_key=api_key,
            target_language=target_language,
            source_language=source_language,
            adult_mode=adult_mode,
            dense_spans=dense_spans,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        api_config = _resolve_api_config(
            base_config, runtime_cli_values, runtime_secure_values
        )
        args = TranslationArgs(
            story_text=story_text,
            job_id=_CLI_JOB_ID,
            target_language=api_config.target_language,
            source_language=api_config.source_language,
            adult_mode=api_config.adult_mode,
            dense_spans=api_config.dense_spans,
            provider=api_config.provider,
            on_job=_echo_job_progress,
        )
        result = asyncio.run(run_translation(args, run_logger=run_logger))
        if json_out is not None:
            _write_json_output(json_out, result)
    except Exception as exc:
        exit_with_command_error("translate", exc)
    finally:
        run_logger.close()

    typer.echo("")
    typer.echo(result.doc.render_text())
    typer.echo("")
    typer.echo(f"Spans: {len(result.doc.spans)}")
    echo_usage_summary(result.usage)
    if json_out is not None:
        typer.echo(f"JSON output: {json_out}")


@app.command("test-provider")
def test_provider_command(
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="Provider preset to test."),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", help="Model id override."),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Base URL override for OpenAI-compatible presets."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="Provider API key override."),
    ] = None,
    prompt_api_key: Annotated[
        bool,
        typer.Option("--prompt-api-key", help="Prompt for API key with hidden input."),
    ] = False,
) -> None:
    """Send a minimal request to the provider and print connection diagnostics."""

    try:
        base_config = _load_yaml_config(config_file)
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            _preset_hint(provider, base_config),
            provider=provider,
            model=model,
            base_url=base_url,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            credential_store_factory=create_credential_store,
        )
        api_config = _resolve_api_config(
            base_config, runtime_cli_values, runtime_secure_values
        )
        diagnostic = describe_provider(api_config.provider)
    except Exception as exc:
        exit_with_command_error("test-provider", exc)

    typer.echo(diagnostic)


@app.command("credentials")
def credentials_command(
    provider: Annotated[
        str,
        typer.Option("--provider", help="Provider preset whose stored key is managed."),
    ] = ProviderPreset.ANTHROPIC.value,
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored provider API keys."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    try:
        preset = ProviderPreset.parse(provider).value
    except ValueError as exc:
        exit_with_command_error(
            "credentials",
            PipelineStageError(stage="credentials", detail=str(exc)),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                f"{preset} API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(preset, prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo(f"{preset} API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key(preset)
        if removed:
            typer.echo(f"Stored {preset} API key cleared from secure credential storage.")
        else:
            typer.echo(f"No stored {preset} API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key(preset) is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored {preset} API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
