"""Module entrypoint for running macos-say as ``python -m macos_say``."""

from __future__ import annotations

from macos_say.cli import main


if __name__ == "__main__":
    main()
