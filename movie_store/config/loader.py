"""
Configuration loader (``movie_store.config.loader``).

Reads a YAML document and turns it into a validated ``StoreSettings``.
Services never call this directly; they receive settings through
``movie_store.config.get_settings()``.

Failure modes:
    * Missing file -> ``FileNotFoundError`` propagates.
    * Malformed YAML -> ``yaml.YAMLError`` propagates.
    * Wrong types or out-of-range values -> ``ConfigurationError``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from movie_store.config.settings import StoreSettings
from movie_store.exceptions import ConfigurationError


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from ``path``."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top-level YAML value must be a mapping")
    return data


def merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` onto ``base`` (returns a new dict)."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = value
    return result


def _positive_int(raw: Any, key: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigurationError(key, f"expected an integer, got {raw!r}")
    if raw <= 0:
        raise ConfigurationError(key, f"must be positive, got {raw}")
    return raw


def _amount(raw: Any, key: str) -> Decimal:
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise ConfigurationError(key, f"expected a decimal amount, got {raw!r}")
    if value < 0:
        raise ConfigurationError(key, f"must not be negative, got {value}")
    return value


def parse_settings(data: dict[str, Any]) -> StoreSettings:
    """Build ``StoreSettings`` from a parsed configuration mapping."""
    store = data.get("store") or {}
    database = data.get("database") or {}
    defaults = StoreSettings()

    url = database.get("url", defaults.database_url)
    if not isinstance(url, str) or not url:
        raise ConfigurationError("database.url", "must be a non-empty string")

    echo = database.get("echo_sql", defaults.echo_sql)
    if not isinstance(echo, bool):
        raise ConfigurationError("database.echo_sql", f"expected a boolean, got {echo!r}")

    return StoreSettings(
        loan_period_days=_positive_int(
            store.get("loan_period_days", defaults.loan_period_days),
            "store.loan_period_days",
        ),
        late_penalty=_amount(
            store.get("late_penalty", defaults.late_penalty),
            "store.late_penalty",
        ),
        database_url=url,
        lock_timeout_seconds=_positive_int(
            database.get("lock_timeout_seconds", defaults.lock_timeout_seconds),
            "database.lock_timeout_seconds",
        ),
        echo_sql=echo,
    )
