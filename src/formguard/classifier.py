"""Composition of prompt building, the HTTP call and response validation."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .client import ClassificationClient
from .errors import ClassificationError, ErrorKind
from .prompt import build_prompt
from .types import ClassificationOutcome, FieldValue
from .validator import parse_response

LOGGER = logging.getLogger(__name__)

CONNECTION_TEST_FIELDS: dict[str, FieldValue] = {"test": "test connection"}


class Classifier:
    """Runs the full classification pipeline without ever raising."""

    def __init__(self, client: ClassificationClient | None = None) -> None:
        self._client = client or ClassificationClient()

    @property
    def client(self) -> ClassificationClient:
        return self._client

    def classify(
        self,
        fields: Mapping[str, FieldValue],
        *,
        api_key: str | None,
    ) -> ClassificationOutcome:
        try:
            if not fields or not isinstance(fields, Mapping):
                raise ClassificationError(
                    ErrorKind.EMPTY_CONTENT, "Invalid or empty field data provided."
                )
            if not api_key:
                raise ClassificationError(ErrorKind.NO_API_KEY, "API key not configured.")
            prompt = build_prompt(fields)
            payload = self._client.request(api_key, prompt)
            label = parse_response(payload)
        except ClassificationError as exc:
            LOGGER.debug("Classification failed: %s (kind=%s)", exc.message, exc.kind.value)
            return ClassificationOutcome.failure(exc)
        return ClassificationOutcome.success(label)


def check_connection(classifier: Classifier, api_key: str | None) -> ClassificationOutcome:
    """Perform one classification with dummy input to verify connectivity."""

    if not api_key:
        return ClassificationOutcome.failure(
            ClassificationError(ErrorKind.NO_API_KEY, "No API key provided.")
        )
    return classifier.classify(CONNECTION_TEST_FIELDS, api_key=api_key)


__all__ = ["Classifier", "CONNECTION_TEST_FIELDS", "check_connection"]
