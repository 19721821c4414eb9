"""Module entrypoint for running docpod as ``python -m docpod``."""

from __future__ import annotations

from docpod.cli import main


if __name__ == "__main__":
    main()
