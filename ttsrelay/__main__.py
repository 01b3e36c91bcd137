"""Module entrypoint for running ttsrelay as ``python -m ttsrelay``."""

from __future__ import annotations

from ttsrelay.cli import main


if __name__ == "__main__":
    main()
