"""Formguard module entrypoint for ``python -m formguard``."""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":  # pragma: no cover - module execution guard
    main()
