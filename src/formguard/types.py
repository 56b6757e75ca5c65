"""Core immutable data structures used throughout Formguard."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .errors import ClassificationError

FieldValue = Union[str, Sequence[str], None]
FormFieldMap = Mapping[str, FieldValue]


class ClassificationLabel(str, Enum):
    """Closed set of labels the remote model may answer with."""

    SPAM = "spam"
    JOB_REQUEST = "job_request"
    LEAD = "lead"


VALID_LABELS: frozenset[str] = frozenset(label.value for label in ClassificationLabel)


@dataclass(frozen=True)
class FormConfig:
    """Per-form spam check settings."""

    enabled: bool = False
    job_request_counts_as_spam: bool = False


@dataclass(frozen=True)
class Submission:
    """Host-supplied context for a single form submission."""

    form_id: str
    fields: FormFieldMap = field(default_factory=dict)
    config: FormConfig | None = None


@dataclass(frozen=True)
class ClassificationOutcome:
    """Either a label or the error that prevented one."""

    label: ClassificationLabel | None = None
    error: ClassificationError | None = None

    def __post_init__(self) -> None:
        if (self.label is None) == (self.error is None):
            raise ValueError("ClassificationOutcome needs exactly one of label or error.")

    @classmethod
    def success(cls, label: ClassificationLabel) -> ClassificationOutcome:
        return cls(label=label)

    @classmethod
    def failure(cls, error: ClassificationError) -> ClassificationOutcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.label is not None


__all__ = [
    "ClassificationLabel",
    "ClassificationOutcome",
    "FieldValue",
    "FormConfig",
    "FormFieldMap",
    "Submission",
    "VALID_LABELS",
]
