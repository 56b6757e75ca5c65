from __future__ import annotations

from pathlib import Path

import pytest

from formguard.classifier import Classifier
from formguard.policy import SpamDecisionPolicy
from tests.fakes import VALID_KEY, FakeCompletionAPI


def build_policy(api: FakeCompletionAPI, api_key: str | None = VALID_KEY) -> SpamDecisionPolicy:
    """Wire the real pipeline to a scripted endpoint."""

    return SpamDecisionPolicy(api_key=api_key, classifier=Classifier(api.client()))


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Automatically mark tests in this package as integration."""

    package_root = Path(__file__).resolve().parent
    integration_mark = pytest.mark.integration
    for item in items:
        try:
            path = Path(item.fspath).resolve()
        except OSError:
            continue
        if package_root in path.parents:
            item.add_marker(integration_mark)
