"""Smoke tests for package imports and CLI wiring."""

from typer.testing import CliRunner

import boka
from boka.cli import app


def test_package_exports_entry_points() -> None:
    assert boka.__version__ == "0.1.0"
    assert callable(boka.run_translation)
    assert boka.TranslationService is not None


def test_cli_help_lists_commands() -> None:
    result = CliRunner().invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("translate", "test-provider", "credentials"):
        assert command in result.output
