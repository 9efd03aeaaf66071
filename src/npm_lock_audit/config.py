"""Runtime settings for npm-lock-audit.

Settings come from an optional JSON file (explicit path, else the
``NPM_LOCK_AUDIT_CONFIG`` environment variable) and are then overridden by
individual environment variables. Recognised file keys: ``dataset``,
``logLevel``, ``warnOnly`` and ``feedUrl``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any
from collections.abc import Mapping

from .ingestion import DATADOG_FEED_URL

CONFIG_PATH_ENV_VAR = "NPM_LOCK_AUDIT_CONFIG"
DATASET_ENV_VAR = "NPM_LOCK_AUDIT_DATASET"
LOG_LEVEL_ENV_VAR = "NPM_LOCK_AUDIT_LOG_LEVEL"
WARN_ONLY_ENV_VAR = "NPM_LOCK_AUDIT_WARN_ONLY"

DEFAULT_DATASET_PATH = Path("data") / "compromised-packages.json"

_TRUTHY = {"1", "true", "yes", "y"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(RuntimeError):
    """Raised when the configuration file or environment is invalid."""


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings container."""

    dataset_source: str = str(DEFAULT_DATASET_PATH)
    log_level: str = "INFO"
    warn_only: bool = False
    feed_url: str = DATADOG_FEED_URL


def _check_log_level(value: Any, origin: str) -> str:
    if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
        allowed = ", ".join(sorted(_LOG_LEVELS))
        raise ConfigError(f"{origin} has invalid log level {value!r} (expected one of {allowed})")
    return value.upper()


def _settings_from_dict(data: Mapping[str, Any], origin: str) -> Settings:
    settings = Settings()

    dataset = data.get("dataset", settings.dataset_source)
    if not isinstance(dataset, str) or not dataset:
        raise ConfigError(f"{origin} has invalid 'dataset' field (must be non-empty string)")

    log_level = _check_log_level(data.get("logLevel", settings.log_level), origin)

    warn_only = data.get("warnOnly", settings.warn_only)
    if not isinstance(warn_only, bool):
        raise ConfigError(f"{origin} has invalid 'warnOnly' field (must be boolean)")

    feed_url = data.get("feedUrl", settings.feed_url)
    if not isinstance(feed_url, str) or not feed_url:
        raise ConfigError(f"{origin} has invalid 'feedUrl' field (must be non-empty string)")

    return Settings(
        dataset_source=dataset,
        log_level=log_level,
        warn_only=warn_only,
        feed_url=feed_url,
    )


def _resolve_config_path(path: Path | str | None, environ: Mapping[str, str]) -> Path | None:
    """Resolve the configuration file path.

    Priority:
    1. Explicit path argument
    2. NPM_LOCK_AUDIT_CONFIG environment variable
    3. None (defaults only)
    """
    if path is not None:
        return Path(path)

    env_path = environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)

    return None


def _read_config_file(config_path: Path) -> Mapping[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in configuration file: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    return data


def _apply_environment(settings: Settings, environ: Mapping[str, str]) -> Settings:
    dataset = environ.get(DATASET_ENV_VAR, "").strip()
    if dataset:
        settings = replace(settings, dataset_source=dataset)

    log_level = environ.get(LOG_LEVEL_ENV_VAR, "").strip()
    if log_level:
        settings = replace(settings, log_level=_check_log_level(log_level, LOG_LEVEL_ENV_VAR))

    warn_only = environ.get(WARN_ONLY_ENV_VAR, "").strip().lower()
    if warn_only:
        settings = replace(settings, warn_only=warn_only in _TRUTHY)

    return settings


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from the optional config file and the environment.

    Args:
        path: Optional path to a JSON config file. If not provided, uses the
            NPM_LOCK_AUDIT_CONFIG env var, or defaults when that is unset.
        environ: Environment mapping; defaults to ``os.environ``.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    environ = os.environ if environ is None else environ
    config_path = _resolve_config_path(path, environ)

    if config_path is None:
        settings = Settings()
    else:
        settings = _settings_from_dict(_read_config_file(config_path), str(config_path))

    return _apply_environment(settings, environ)
