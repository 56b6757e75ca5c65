"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .apikey import is_api_key_valid, resolve_api_key
from .client import API_ENDPOINT, DEFAULT_MODEL, REQUEST_TIMEOUT
from .types import FormConfig

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/formguard/config.yaml")
DEFAULT_ROOT_DIR = Path("~/.local/lib/formguard")
DEFAULT_LOG_LEVEL = "info"
CONFIG_ENV = "FORMGUARD_CONFIG"
MODEL_ENV = "FORMGUARD_MODEL"
ENDPOINT_ENV = "FORMGUARD_ENDPOINT"


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    debug_file: bool = False


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    root_dir: Path
    api_key: str
    model: str
    endpoint: str
    timeout: float
    logging: LoggingConfig
    forms: dict[str, FormConfig] = field(default_factory=dict)

    def form_config(self, form_id: str) -> FormConfig:
        """Return settings for ``form_id``, falling back to the disabled defaults."""

        return self.forms.get(form_id) or FormConfig()


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML."""

    config_path = resolve_config_path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw)


def resolve_config_path(explicit: Path | str | None) -> Path:
    if explicit:
        return Path(explicit).expanduser()
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def _parse_config(raw: dict[str, Any]) -> Config:
    root_dir = Path(raw.get("root_dir") or DEFAULT_ROOT_DIR).expanduser()
    api_key = resolve_api_key(_parse_optional_string(raw.get("api_key"), "api_key"))
    model = os.environ.get(MODEL_ENV) or _parse_optional_string(raw.get("model"), "model")
    endpoint = os.environ.get(ENDPOINT_ENV) or _parse_optional_string(
        raw.get("endpoint"), "endpoint"
    )
    config = Config(
        root_dir=root_dir,
        api_key=api_key,
        model=model or DEFAULT_MODEL,
        endpoint=endpoint or API_ENDPOINT,
        timeout=_parse_timeout(raw.get("timeout")),
        logging=_parse_logging(raw.get("logging")),
        forms=_parse_forms(raw.get("forms")),
    )
    _warn_if_api_key_unusable(config)
    return config


def _parse_optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{field_name} must be a string.")
    text = value.strip()
    return text or None


def _parse_timeout(value: Any) -> float:
    if value is None:
        return REQUEST_TIMEOUT
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError("timeout must be a number of seconds.")
    if value <= 0:
        raise ConfigError("timeout must be greater than zero.")
    return float(value)


def _parse_forms(value: Any) -> dict[str, FormConfig]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("forms must be a mapping of form id to settings.")

    forms: dict[str, FormConfig] = {}
    for form_id, raw_cfg in value.items():
        name = str(form_id)
        if raw_cfg is None:
            forms[name] = FormConfig()
            continue
        if not isinstance(raw_cfg, dict):
            raise ConfigError(f"Form '{name}' config must be a mapping.")
        forms[name] = FormConfig(
            enabled=_parse_flag(raw_cfg.get("enabled", False), f"forms.{name}.enabled"),
            job_request_counts_as_spam=_parse_flag(
                raw_cfg.get("job_request_counts_as_spam", False),
                f"forms.{name}.job_request_counts_as_spam",
            ),
        )
    return forms


def _parse_flag(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{field_name} must be true or false.")
    return value


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).lower()
    debug_file = _parse_flag(value.get("debug_file", False), "logging.debug_file")
    return LoggingConfig(level=level, debug_file=debug_file)


def _warn_if_api_key_unusable(config: Config) -> None:
    if not config.api_key:
        LOGGER.warning("No API key configured; spam checks will allow every submission.")
    elif not is_api_key_valid(config.api_key):
        LOGGER.warning("Configured API key has an unexpected format; spam checks are disabled.")


__all__ = [
    "Config",
    "ConfigError",
    "LoggingConfig",
    "load_config",
    "resolve_config_path",
]
