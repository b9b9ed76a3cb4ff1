"""CLI provider runtime resolution helpers.

This module isolates runtime source assembly, API-key prompting, and secure
API-key persistence from the command wiring layer.
"""

from __future__ import annotations

from typing import Callable, Protocol

import typer

from .credentials import create_credential_store
from .errors import PipelineStageError
from .parsing import normalize_optional_string


class CredentialStoreProtocol(Protocol):
    """Protocol for secure credential store operations used by CLI runtime resolution."""

    def get_api_key(self, preset: str) -> str | None:
        """Return the stored API key for a preset, if available."""

    def set_api_key(self, preset: str, api_key: str) -> None:
        """Persist an API key for a preset in secure storage."""


def _set_runtime_cli_value(
    runtime_cli_values: dict[str, str],
    key: str,
    value: str | None,
) -> None:
    """Set a normalized runtime CLI value when user input is present."""

    normalized = normalize_optional_string(value)
    if normalized is not None:
        runtime_cli_values[key] = normalized


def _prompt_for_api_key(preset: str) -> str | None:
    return normalize_optional_string(
        typer.prompt(
            f"{preset} API key (hidden; leave blank to skip)",
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def resolve_provider_runtime_sources(
    preset: str,
    *,
    provider: str | None = None,
    model: str | None = None,
    base_url: str | None = None,
    api_key: str | None = None,
    target_language: str | None = None,
    source_language: str | None = None,
    adult_mode: bool | None = None,
    dense_spans: bool | None = None,
    prompt_api_key: bool = False,
    store_api_key: bool = False,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve CLI and secure runtime source mappings for provider configuration.

    Args:
        preset: Provider preset whose stored key should be loaded.

    Returns:
        A `(cli_values, secure_values)` pair for `RuntimeConfigSources`.
    """

    runtime_cli_values: dict[str, str] = {}
    _set_runtime_cli_value(runtime_cli_values, "provider", provider)
    _set_runtime_cli_value(runtime_cli_values, "model", model)
    _set_runtime_cli_value(runtime_cli_values, "base_url", base_url)
    _set_runtime_cli_value(runtime_cli_values, "api_key", api_key)
    _set_runtime_cli_value(runtime_cli_values, "target_language", target_language)
    _set_runtime_cli_value(runtime_cli_values, "source_language", source_language)
    if adult_mode is not None:
        runtime_cli_values["adult_mode"] = "true" if adult_mode else "false"
    if dense_spans is not None:
        runtime_cli_values["dense_spans"] = "true" if dense_spans else "false"

    if prompt_api_key and "api_key" not in runtime_cli_values:
        prompted_api_key = _prompt_for_api_key(preset)
        if prompted_api_key is not None:
            runtime_cli_values["api_key"] = prompted_api_key

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    stored_api_key = credential_store.get_api_key(preset)
    if stored_api_key is not None:
        runtime_secure_values["api_key"] = stored_api_key

    if store_api_key and "api_key" in runtime_cli_values:
        try:
            credential_store.set_api_key(preset, runtime_cli_values["api_key"])
        except Exception as exc:
            raise PipelineStageError(
                stage="credentials",
                detail=f"Failed to store API key securely: {exc}",
                hint=(
                    "Install and configure a keyring backend, or rerun without "
                    "`--store-api-key` for one-off usage."
                ),
            ) from exc
        typer.echo("Stored API key in secure credential storage.")

    return runtime_cli_values, runtime_secure_values
