"""Fail-open spam decision policy applied once per form submission."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from .apikey import is_api_key_valid
from .classifier import Classifier
from .types import ClassificationLabel, FormConfig, Submission

LOGGER = logging.getLogger(__name__)


@dataclass
class PolicyMetrics:
    """Lightweight counters for policy decisions."""

    processed: int = 0
    skipped: int = 0
    errors: int = 0
    blocked: int = 0
    allowed: int = 0
    labels: dict[str, int] = field(default_factory=dict)

    def record_label(self, label: ClassificationLabel) -> None:
        self.labels[label.value] = self.labels.get(label.value, 0) + 1


class SpamDecisionPolicy:
    """Maps a classification onto a spam flag, allowing on any failure.

    Only an explicit ``spam`` label, or ``job_request`` on forms configured to
    treat job requests as spam, blocks a submission. An incoming flag that is
    already set is never cleared.
    """

    def __init__(self, *, api_key: str | None, classifier: Classifier) -> None:
        self._api_key = api_key or ""
        self._classifier = classifier
        self._lock = threading.Lock()
        self.metrics = PolicyMetrics()

    def check_spam(self, spam: bool, submission: Submission | None = None) -> bool:
        """Host hook: return the (possibly updated) spam flag for a submission."""

        with self._lock:
            self.metrics.processed += 1

        if spam:
            return spam

        if not is_api_key_valid(self._api_key):
            LOGGER.debug("No valid API key set, skipping spam check")
            return self._skip(spam)

        if submission is None or not submission.form_id:
            LOGGER.debug("Could not resolve form, skipping spam check")
            return self._skip(spam)

        config = submission.config or FormConfig()
        if not config.enabled:
            LOGGER.debug("Spam check not enabled for form %s", submission.form_id)
            return self._skip(spam)

        if not submission.fields:
            LOGGER.debug("No form data found for form %s, skipping spam check", submission.form_id)
            return self._skip(spam)

        try:
            outcome = self._classifier.classify(submission.fields, api_key=self._api_key)
        except Exception:
            LOGGER.exception(
                "Classification error [form=%s]: unexpected failure", submission.form_id
            )
            return self._fail(spam)

        label = outcome.label
        if label is None:
            error = outcome.error
            LOGGER.error(
                "Classification error [form=%s]: %s (kind=%s)",
                submission.form_id,
                error.message if error is not None else "no label returned",
                error.kind.value if error is not None else "unknown",
            )
            return self._fail(spam)

        blocked = label is ClassificationLabel.SPAM or (
            label is ClassificationLabel.JOB_REQUEST and config.job_request_counts_as_spam
        )
        with self._lock:
            self.metrics.record_label(label)
            if blocked:
                self.metrics.blocked += 1
            else:
                self.metrics.allowed += 1

        if blocked:
            LOGGER.debug("Classified as %s (blocked) for form %s", label.value, submission.form_id)
            return True
        LOGGER.debug("Classified as %s (not spam) for form %s", label.value, submission.form_id)
        return spam

    def _fail(self, spam: bool) -> bool:
        with self._lock:
            self.metrics.errors += 1
            self.metrics.allowed += 1
        return spam

    def _skip(self, spam: bool) -> bool:
        with self._lock:
            self.metrics.skipped += 1
            self.metrics.allowed += 1
        return spam


__all__ = ["PolicyMetrics", "SpamDecisionPolicy"]
