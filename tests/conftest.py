"""Shared pytest fixtures for the full Boka test suite."""

from __future__ import annotations

import pytest

from boka.config import _ENV_KEYS
from boka.provider_factory import ANTHROPIC_API_KEY_ENV


@pytest.fixture(autouse=True)
def _isolated_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell provider settings from leaking into tests."""

    for env_name in (*_ENV_KEYS.values(), ANTHROPIC_API_KEY_ENV):
        monkeypatch.delenv(env_name, raising=False)
