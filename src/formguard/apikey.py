"""API key resolution, validation and display helpers."""

from __future__ import annotations

import os

API_KEY_PREFIX = "sk-"
API_KEY_ENV = "FORMGUARD_API_KEY"


def resolve_api_key(configured: str | None) -> str:
    """Prefer the environment over the config file; empty string when unset."""

    env_value = os.environ.get(API_KEY_ENV)
    if env_value and env_value.strip():
        return env_value.strip()
    return (configured or "").strip()


def is_api_key_valid(api_key: str | None) -> bool:
    return bool(api_key) and api_key.startswith(API_KEY_PREFIX)


def mask_api_key(api_key: str | None) -> str:
    """Show the first 7 and last 4 characters only."""

    if not api_key:
        return ""
    hidden = "*" * max(0, len(api_key) - 11)
    return f"{api_key[:7]}{hidden}{api_key[-4:]}"


__all__ = ["API_KEY_ENV", "API_KEY_PREFIX", "is_api_key_valid", "mask_api_key", "resolve_api_key"]
