"""Module entrypoint for running neonbuilder as ``python -m neonbuilder``."""

from __future__ import annotations

from neonbuilder.cli import main


if __name__ == "__main__":
    main()
