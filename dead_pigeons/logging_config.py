"""Logging configuration."""

from __future__ import annotations

import logging

from flask import Flask

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Third-party loggers that are noisy at INFO.
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "werkzeug")


def configure_logging(app: Flask) -> None:
    """Plain-text logs; round, board and ledger events come from ``dead_pigeons.*``."""

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("dead_pigeons").setLevel(level)

    quiet = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet)

    logging.getLogger(__name__).info(
        "Logging configured (env=%s, level=%s, pool=1..%s)",
        app.config.get("APP_ENV"),
        level_name,
        app.config.get("NUMBER_POOL_MAX"),
    )
