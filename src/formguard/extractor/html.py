"""Helpers for removing markup from submitted values."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def strip_markup(value: str) -> str:
    """Return the text content of ``value`` with tags and control bytes removed."""

    text = _CONTROL_RE.sub("", value)
    if "<" in text:
        text = BeautifulSoup(text, "lxml").get_text()
    return text


__all__ = ["strip_markup"]
