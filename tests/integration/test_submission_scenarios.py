from __future__ import annotations

import json
import logging

import httpx
import pytest

from formguard.extractor import FormTag, extract_form_data
from formguard.types import FormConfig, Submission
from tests.fakes import FakeCompletionAPI, api_error, completion
from tests.integration.conftest import build_policy

ENABLED = FormConfig(enabled=True)


def _submission(message: str, config: FormConfig = ENABLED) -> Submission:
    return Submission(form_id="42", fields={"message": message}, config=config)


def test_spam_message_is_blocked() -> None:
    api = FakeCompletionAPI(completion("spam"))
    policy = build_policy(api)

    assert policy.check_spam(False, _submission("Buy cheap watches now!!!")) is True
    prompt = json.loads(api.requests[0].content)["messages"][0]["content"]
    assert prompt.endswith("[INPUT TEXT]\nmessage: Buy cheap watches now!!!")


def test_job_request_is_allowed_by_default() -> None:
    api = FakeCompletionAPI(completion("job_request"))
    policy = build_policy(api)

    submission = _submission(
        "Looking to hire a freelance developer",
        FormConfig(enabled=True, job_request_counts_as_spam=False),
    )

    assert policy.check_spam(False, submission) is False


def test_job_request_is_blocked_when_configured() -> None:
    api = FakeCompletionAPI(completion("job_request"))
    policy = build_policy(api)

    submission = _submission(
        "Looking to hire a freelance developer",
        FormConfig(enabled=True, job_request_counts_as_spam=True),
    )

    assert policy.check_spam(False, submission) is True


def test_missing_api_key_skips_pipeline() -> None:
    api = FakeCompletionAPI(completion("spam"))
    policy = build_policy(api, api_key=None)

    assert policy.check_spam(False, _submission("Buy cheap watches now!!!")) is False
    assert api.calls == 0


def test_repeated_timeouts_fail_open(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    api = FakeCompletionAPI(httpx.ReadTimeout("timed out"))
    policy = build_policy(api)

    assert policy.check_spam(False, _submission("Hello there")) is False

    assert api.calls == 2
    assert api.sleeps == [1.0]
    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "kind=network_error" in errors[0].getMessage()


@pytest.mark.parametrize(
    "step",
    [
        httpx.ConnectError("refused"),
        api_error(429, "slow down"),
        api_error(401, "Incorrect API key provided"),
        api_error(503),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"choices": [{"message": {}}]}),
        completion("Spam."),
    ],
)
def test_every_failure_allows_and_logs(step, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    policy = build_policy(FakeCompletionAPI(step))

    assert policy.check_spam(False, _submission("Hello there")) is False
    assert sum(record.levelno == logging.ERROR for record in caplog.records) == 1


def test_posted_form_flows_through_extraction() -> None:
    api = FakeCompletionAPI(completion("lead"))
    policy = build_policy(api)
    tags = [
        FormTag("your-name"),
        FormTag("your-message", "textarea"),
        FormTag("upload", "file"),
        FormTag("submit", "submit"),
    ]
    posted = {
        "your-name": "Jane",
        "your-message": "We need a <b>new</b> website",
        "upload": "brief.pdf",
    }

    fields = extract_form_data(tags, posted)
    verdict = policy.check_spam(False, Submission(form_id="7", fields=fields, config=ENABLED))

    assert verdict is False
    prompt = json.loads(api.requests[0].content)["messages"][0]["content"]
    assert prompt.endswith("your-name: Jane\nyour-message: We need a new website")
    assert "brief.pdf" not in prompt


def test_unencodable_api_key_fails_open(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    api = FakeCompletionAPI(completion("spam"))
    policy = build_policy(api, api_key="sk-clé-0123456789")

    assert policy.check_spam(False, _submission("Buy now")) is False
    assert api.calls == 0
    assert sum(record.levelno == logging.ERROR for record in caplog.records) == 1


def test_undecodable_form_bytes_never_reach_the_host() -> None:
    api = FakeCompletionAPI(completion("lead"))
    policy = build_policy(api)
    message = b"caf\xe9".decode("utf-8", "surrogateescape")

    assert policy.check_spam(False, _submission(message)) is False
