"""Strict validation of completion payloads."""

from __future__ import annotations

import logging
from typing import Any

from .errors import ClassificationError, ErrorKind
from .types import VALID_LABELS, ClassificationLabel

LOGGER = logging.getLogger(__name__)


def parse_response(payload: Any) -> ClassificationLabel:
    """Extract the label from a completion payload.

    Only an exact match after trimming and lowercasing is accepted; anything
    else means the model did not follow its instructions and is rejected.
    """

    choices = payload.get("choices") if isinstance(payload, dict) else None
    if not isinstance(choices, list) or not choices:
        LOGGER.debug("Invalid response structure: %r", payload)
        raise ClassificationError(ErrorKind.INVALID_RESPONSE, "Invalid API response structure.")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        LOGGER.debug("Missing content in response choice: %r", first)
        raise ClassificationError(ErrorKind.MISSING_CONTENT, "Missing content in API response.")

    normalized = content.strip().lower()
    if normalized not in VALID_LABELS:
        LOGGER.debug(
            "Invalid classification %r, expected one of: %s",
            normalized,
            ", ".join(sorted(VALID_LABELS)),
        )
        raise ClassificationError(
            ErrorKind.INVALID_CLASSIFICATION,
            f"Invalid classification received: {normalized}",
            received=normalized,
        )

    LOGGER.debug("Valid classification: %s", normalized)
    return ClassificationLabel(normalized)


__all__ = ["parse_response"]
