"""Module entrypoint for running Boka as ``python -m boka``."""

from __future__ import annotations

from boka.cli import main


if __name__ == "__main__":
    main()
