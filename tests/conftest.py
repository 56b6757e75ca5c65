from __future__ import annotations

import logging

import pytest

from formguard.logging import ConsoleFormatter


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FORMGUARD_API_KEY", "FORMGUARD_CONFIG", "FORMGUARD_MODEL", "FORMGUARD_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Drop handlers installed by ``configure_logging`` during a test."""

    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, logging.FileHandler) or isinstance(
            handler.formatter, ConsoleFormatter
        ):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
