# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup.

Everything logs through ``logging.getLogger(__name__)``; this module only
attaches handlers to the package logger once per process.
"""

from __future__ import annotations

import logging
from pathlib import Path

from webapp.config import AppConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGER = "webapp"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


def parse_level(name: str) -> int:
    return _LEVELS.get((name or "").strip().lower(), logging.INFO)


def setup_logging(config: AppConfig) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(parse_level(config.log_level))
    if getattr(logger, "_webapp_configured", False):
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    logfile = Path(config.log_directory) / f"{config.app_name}.log"
    try:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(logfile, encoding="utf-8")
    except OSError as e:
        logger.error("error opening logfile %s: %s", logfile, e)
    else:
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger._webapp_configured = True  # type: ignore[attr-defined]
    return logger
