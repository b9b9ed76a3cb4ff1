"""Configuration model and loaders for Boka.

Responsibilities:
- Define provider presets and their baked-in endpoint/model defaults.
- Define runtime configuration as typed dataclasses.
- Provide deterministic precedence resolution for provider settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `ProviderPreset`: supported provider identifiers.
- `ProviderConfig`: preset plus optional API key/base URL/model overrides.
- `ApiConfig`: provider settings plus per-job language and register flags.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `BokaConfig`: file-level settings resolved into `ApiConfig`.
- `ConfigLoader`: static construction helpers for `BokaConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_permissive_boolean,
    parse_required_boolean,
)


class ProviderPreset(str, Enum):
    """Supported LLM provider presets."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    OLLAMA = "ollama"
    LMSTUDIO = "lmstudio"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: object) -> ProviderPreset:
        """Parse a preset identifier case-insensitively."""

        if isinstance(value, ProviderPreset):
            return value
        token = (normalize_optional_string(value) or "").lower()
        for preset in cls:
            if preset.value == token:
                return preset
        supported = ", ".join(preset.value for preset in cls)
        raise ValueError(f"Unsupported provider preset `{value}`; supported: {supported}.")


@dataclass(frozen=True, slots=True)
class PresetDefaults:
    """Baked-in defaults for one generic chat-completion preset."""

    base_url: str | None
    model: str | None
    requires_api_key: bool = False


ANTHROPIC_DEFAULT_MODEL = "claude-sonnet-4-20250514"

PRESET_DEFAULTS: dict[ProviderPreset, PresetDefaults] = {
    ProviderPreset.OPENAI: PresetDefaults(
        base_url="https://api.openai.com/v1",
        model="gpt-4o-mini",
        requires_api_key=True,
    ),
    ProviderPreset.OPENROUTER: PresetDefaults(
        base_url="https://openrouter.ai/api/v1",
        model="openai/gpt-4o-mini",
        requires_api_key=True,
    ),
    ProviderPreset.OLLAMA: PresetDefaults(
        base_url="http://localhost:11434/v1",
        model="llama3.1",
    ),
    ProviderPreset.LMSTUDIO: PresetDefaults(
        base_url="http://localhost:1234/v1",
        model="llama3.1",
    ),
    ProviderPreset.CUSTOM: PresetDefaults(base_url=None, model=None),
    ProviderPreset.ANTHROPIC: PresetDefaults(
        base_url=None,
        model=ANTHROPIC_DEFAULT_MODEL,
        requires_api_key=True,
    ),
}

_DEFAULT_TARGET_LANGUAGE = "fr"


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Provider preset plus optional overrides.

    Attributes:
        preset: Provider preset identifier.
        api_key: Optional API key (never persisted or logged).
        base_url: Optional base URL override for generic presets.
        model: Optional model override.
    """

    preset: ProviderPreset = ProviderPreset.ANTHROPIC
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None

    def as_diagnostic_metadata(self) -> dict[str, str]:
        """Return non-secret provider metadata safe for logs and CLI output."""

        return {
            "provider": self.preset.value,
            "base_url": self.base_url or "default",
            "model": self.model or "default",
            "api_key": "set" if normalize_optional_string(self.api_key) else "unset",
        }


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Resolved settings for one translation job's provider client."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    target_language: str = _DEFAULT_TARGET_LANGUAGE
    source_language: str | None = None
    adult_mode: bool = False
    dense_spans: bool = False


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


_ENV_KEYS = {
    "provider": "BOKA_PROVIDER",
    "model": "BOKA_MODEL",
    "base_url": "BOKA_BASE_URL",
    "api_key": "BOKA_API_KEY",
    "target_language": "BOKA_TARGET_LANGUAGE",
    "source_language": "BOKA_SOURCE_LANGUAGE",
    "adult_mode": "BOKA_ADULT_MODE",
    "dense_spans": "BOKA_DENSE_SPANS",
}


@dataclass(slots=True)
class BokaConfig:
    """File-level settings for translation runs.

    Attributes:
        target_language: Target language code or free-text name.
        source_language: Optional source language code.
        adult_mode: Whether vulgar registers are allowed.
        dense_spans: Whether planning aims for more swappable spans per segment.
        provider: Provider preset identifier.
        model: Optional model override.
        base_url: Optional base URL override.
        api_key: Optional API key.
        runtime_sources: Optional runtime source overrides injected by CLI.
    """

    target_language: str = _DEFAULT_TARGET_LANGUAGE
    source_language: str | None = None
    adult_mode: bool = False
    dense_spans: bool = False
    provider: str = ProviderPreset.ANTHROPIC.value
    model: str | None = None
    base_url: str | None = None
    api_key: str | None = None
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate configuration values before a job starts."""

        ProviderPreset.parse(self.provider)
        if normalize_optional_string(self.target_language) is None:
            raise ValueError("`target_language` must be a non-empty string.")

    def resolved_api_config(self, sources: RuntimeConfigSources | None = None) -> ApiConfig:
        """Resolve provider and job settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        preset = ProviderPreset.parse(
            self._resolve_value("provider", self.provider, resolved_sources)
        )
        provider = ProviderConfig(
            preset=preset,
            api_key=self._resolve_value("api_key", self.api_key, resolved_sources),
            base_url=self._resolve_value("base_url", self.base_url, resolved_sources),
            model=self._resolve_value("model", self.model, resolved_sources),
        )
        target_language = self._resolve_value(
            "target_language", self.target_language, resolved_sources
        )
        if target_language is None:
            raise ValueError(
                "`target_language` could not be resolved from CLI, secure storage, env, "
                "or defaults."
            )
        return ApiConfig(
            provider=provider,
            target_language=target_language,
            source_language=self._resolve_value(
                "source_language", self.source_language, resolved_sources
            ),
            adult_mode=self._resolve_bool("adult_mode", self.adult_mode, resolved_sources),
            dense_spans=self._resolve_bool("dense_spans", self.dense_spans, resolved_sources),
        )

    def _resolve_value(
        self,
        key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional value from sources in deterministic precedence order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, _ENV_KEYS[key]),
        ):
            value = self._normalized_lookup(mapping, lookup_key)
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    def _resolve_bool(
        self,
        key: str,
        default_value: bool,
        sources: RuntimeConfigSources,
    ) -> bool:
        """Resolve a boolean value from sources in deterministic precedence order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, _ENV_KEYS[key]),
        ):
            value = self._normalized_lookup(mapping, lookup_key)
            if value is not None:
                return parse_required_boolean(value, key)
        return bool(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))


class ConfigLoader:
    """Factory methods for creating `BokaConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "target_language",
            "source_language",
            "adult_mode",
            "dense_spans",
            "provider",
            "model",
            "base_url",
            "api_key",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> BokaConfig:
        """Create a validated config from a YAML file."""

        raw_text = path.read_text(encoding="utf-8")
        payload = yaml.safe_load(raw_text)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> BokaConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        runtime_env = {
            key: value
            for key, value in env_map.items()
            if key in _ENV_KEYS.values() and normalize_optional_string(value) is not None
        }
        config = BokaConfig(runtime_sources=RuntimeConfigSources(env=runtime_env))
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> BokaConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        provider = normalize_optional_string(payload.get("provider")) or ProviderPreset.ANTHROPIC.value
        try:
            ProviderPreset.parse(provider)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `provider`: {exc}") from exc

        config = BokaConfig(
            target_language=(
                normalize_optional_string(payload.get("target_language"))
                or _DEFAULT_TARGET_LANGUAGE
            ),
            source_language=normalize_optional_string(payload.get("source_language")),
            adult_mode=ConfigLoader._optional_boolean(payload, "adult_mode", source_label),
            dense_spans=ConfigLoader._optional_boolean(payload, "dense_spans", source_label),
            provider=provider.lower(),
            model=normalize_optional_string(payload.get("model")),
            base_url=normalize_optional_string(payload.get("base_url")),
            api_key=normalize_optional_string(payload.get("api_key")),
        )
        config.validate()
        return config

    @staticmethod
    def _optional_boolean(payload: Mapping[str, Any], key: str, source_label: str) -> bool:
        """Read and validate an optional boolean field, defaulting to `False`."""

        if key not in payload or payload[key] is None:
            return False
        parsed = parse_permissive_boolean(payload[key])
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed
