from __future__ import annotations

import pytest

from formguard.apikey import API_KEY_ENV, is_api_key_valid, mask_api_key, resolve_api_key


@pytest.mark.parametrize(
    "key, expected",
    [
        ("sk-abc", True),
        ("sk-proj-0123456789", True),
        ("", False),
        (None, False),
        ("pk-abc", False),
        (" sk-abc", False),
        ("SK-abc", False),
    ],
)
def test_is_api_key_valid(key, expected) -> None:
    assert is_api_key_valid(key) is expected


def test_mask_api_key_keeps_prefix_and_suffix() -> None:
    assert mask_api_key("sk-proj-abcdefgh1234") == "sk-proj" + "*" * 9 + "1234"


def test_mask_short_key_has_no_stars() -> None:
    assert mask_api_key("sk-abc1234") == "sk-abc1" + "1234"
    assert mask_api_key("") == ""
    assert mask_api_key(None) == ""


def test_resolve_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(API_KEY_ENV, "  sk-from-env ")
    assert resolve_api_key("sk-from-config") == "sk-from-env"


def test_resolve_falls_back_to_config() -> None:
    assert resolve_api_key(" sk-from-config\n") == "sk-from-config"
    assert resolve_api_key(None) == ""
