"""
Logging configuration for the CLI and the API app.

The handlers and formatters come from `config/logging.yaml`. The level applies to the
root logger, to the `citycarbon` package logger and to any handler that pins a level.
It comes from the `level` argument (CLI `--log-level`), then `app.log_level` in
settings (`CITYCARBON_LOG_LEVEL`).
"""

from __future__ import annotations

import copy
import logging
import logging.config

from citycarbon.config.settings import get_logging_config, get_settings

PACKAGE_LOGGER = "citycarbon"


def configure_logging(level: str | None = None) -> str:
    """Apply the packaged logging config and return the effective level name."""
    level = (level or get_settings().app.log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: '{level}'")

    config = copy.deepcopy(get_logging_config())
    config.setdefault("root", {})["level"] = level
    config.setdefault("loggers", {}).setdefault(PACKAGE_LOGGER, {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
    return level
