"""Prompt construction for the remote classifier."""

from __future__ import annotations

import re
from collections.abc import Mapping

from .errors import ClassificationError, ErrorKind
from .types import FieldValue

# Contract with the remote model. Do not edit without re-validating labels.
PROMPT_TEMPLATE = (
    "[ROLE] You are a text classifier.\n"
    "[CONTEXT] You receive a generic text and must label it.\n"
    "[GOAL] Return only one of these three labels: spam, job_request, lead.\n"
    "[CONSTRAINTS] No explanation, no extra text, no symbols.\n"
    "[OUTPUT SPEC] Output exactly one lowercase word from the allowed labels.\n"
    "[QUALITY BAR] Output is valid only if it matches one of the 3 labels.\n"
    "[FAIL-SAFES] If ambiguous → choose the most plausible label without explanation.\n"
    "[INPUT TEXT]\n"
)

_WHITESPACE_RE = re.compile(r"\s+")


def clean_field_value(value: FieldValue) -> str:
    """Flatten a raw field value into a single trimmed line of text."""

    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(item) for item in value)
    text = _WHITESPACE_RE.sub(" ", str(value))
    return text.strip()


def prepare_content(fields: Mapping[str, FieldValue]) -> str:
    """Render non-empty fields as ``name: value`` lines in encounter order."""

    lines: list[str] = []
    for name, value in fields.items():
        if not value:
            continue
        cleaned = clean_field_value(value)
        if cleaned:
            lines.append(f"{name}: {cleaned}")
    return "\n".join(lines)


def build_prompt(fields: Mapping[str, FieldValue]) -> str:
    """Return the full prompt, raising when there is nothing to classify."""

    content = prepare_content(fields)
    if not content:
        raise ClassificationError(ErrorKind.EMPTY_CONTENT, "No content to classify.")
    return PROMPT_TEMPLATE + content


__all__ = ["PROMPT_TEMPLATE", "build_prompt", "clean_field_value", "prepare_content"]
