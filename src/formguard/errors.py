"""Error taxonomy for the classification pipeline."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Reasons a classification attempt can fail."""

    NO_API_KEY = "no_api_key"
    EMPTY_CONTENT = "empty_content"
    NETWORK_ERROR = "network_error"
    RATE_LIMITED_EXHAUSTED = "rate_limited_exhausted"
    API_ERROR = "api_error"
    INVALID_RESPONSE = "invalid_response"
    MISSING_CONTENT = "missing_content"
    INVALID_CLASSIFICATION = "invalid_classification"


class ClassificationError(RuntimeError):
    """Raised by pipeline stages; always recoverable by the caller."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status: int | None = None,
        received: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status
        self.received = received

    def __repr__(self) -> str:
        return f"ClassificationError(kind={self.kind.value!r}, message={self.message!r})"


__all__ = ["ErrorKind", "ClassificationError"]
