"""
movie_store.config -- single public entrypoint for store configuration.

``get_settings()`` is the only way runtime code obtains settings.  The
packaged ``defaults.yaml`` is always loaded first; an optional override file
(argument or ``MOVIE_STORE_CONFIG``) is merged on top, and
``MOVIE_STORE_DATABASE_URL`` wins over any file value for the database URL.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from movie_store.config.loader import load_yaml, merge, parse_settings
from movie_store.config.settings import StoreSettings

__all__ = ["StoreSettings", "get_settings", "DEFAULTS_PATH"]

_logger = logging.getLogger("movie_store.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_ENV = "MOVIE_STORE_CONFIG"
DATABASE_URL_ENV = "MOVIE_STORE_DATABASE_URL"


def get_settings(path: Path | str | None = None) -> StoreSettings:
    """Load, merge and validate store settings.

    Args:
        path: Optional YAML file overriding the packaged defaults.  Falls
            back to the ``MOVIE_STORE_CONFIG`` environment variable.

    Raises:
        FileNotFoundError: The override file does not exist.
        ConfigurationError: A value is missing the expected type or range.
    """
    data = load_yaml(DEFAULTS_PATH)

    override = path or os.environ.get(CONFIG_ENV)
    if override:
        data = merge(data, load_yaml(Path(override)))

    env_url = os.environ.get(DATABASE_URL_ENV)
    if env_url:
        data = merge(data, {"database": {"url": env_url}})

    settings = parse_settings(data)
    _logger.info(
        "settings_loaded",
        extra={
            "override": str(override) if override else None,
            "loan_period_days": settings.loan_period_days,
            "late_penalty": str(settings.late_penalty),
        },
    )
    return settings
