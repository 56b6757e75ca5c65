from dataclasses import FrozenInstanceError

import pytest

from formguard import types as formguard_types
from formguard.errors import ClassificationError, ErrorKind


def test_labels_are_closed_set() -> None:
    assert formguard_types.VALID_LABELS == frozenset({"spam", "job_request", "lead"})
    with pytest.raises(ValueError):
        formguard_types.ClassificationLabel("ham")


def test_form_config_defaults_are_disabled() -> None:
    config = formguard_types.FormConfig()
    assert config.enabled is False
    assert config.job_request_counts_as_spam is False


def test_form_config_is_immutable() -> None:
    config = formguard_types.FormConfig(enabled=True)
    with pytest.raises(FrozenInstanceError):
        config.enabled = False  # type: ignore[misc]


def test_outcome_requires_exactly_one_side() -> None:
    with pytest.raises(ValueError):
        formguard_types.ClassificationOutcome()
    with pytest.raises(ValueError):
        formguard_types.ClassificationOutcome(
            label=formguard_types.ClassificationLabel.SPAM,
            error=ClassificationError(ErrorKind.API_ERROR, "boom"),
        )


def test_outcome_constructors() -> None:
    ok = formguard_types.ClassificationOutcome.success(formguard_types.ClassificationLabel.LEAD)
    failed = formguard_types.ClassificationOutcome.failure(
        ClassificationError(ErrorKind.MISSING_CONTENT, "missing")
    )
    assert ok.ok is True
    assert failed.ok is False
    assert failed.error is not None and failed.error.kind is ErrorKind.MISSING_CONTENT


def test_submission_defaults() -> None:
    submission = formguard_types.Submission(form_id="contact")
    assert submission.fields == {}
    assert submission.config is None
