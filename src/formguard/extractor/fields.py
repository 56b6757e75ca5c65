"""Collect classifiable field values from a posted form."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .html import strip_markup

SKIPPED_BASETYPES = frozenset({"submit", "file"})


@dataclass(frozen=True)
class FormTag:
    """A named control declared by the host form."""

    name: str
    basetype: str = "text"


def extract_form_data(tags: Iterable[FormTag], posted: Mapping[str, Any]) -> dict[str, str]:
    """Map tag names to cleaned posted values, in declaration order.

    Unnamed tags, submit buttons and file uploads are skipped, as are values
    that end up empty after cleaning.
    """

    data: dict[str, str] = {}
    for tag in tags:
        if not tag.name or tag.basetype in SKIPPED_BASETYPES:
            continue
        raw = posted.get(tag.name, "")
        if isinstance(raw, (list, tuple)):
            items = (strip_markup(str(item)).strip() for item in raw if item is not None)
            value = ", ".join(item for item in items if item)
        else:
            value = strip_markup("" if raw is None else str(raw))
        value = value.strip()
        if value:
            data[tag.name] = value
    return data


__all__ = ["SKIPPED_BASETYPES", "FormTag", "extract_form_data"]
