from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from uvicorn.config import LOGGING_CONFIG

LOGGER_NAME = "tilawa"


def _level(debug: bool) -> str:
    return "DEBUG" if debug else "INFO"


def build_uvicorn_log_config(debug: bool = False) -> dict[str, Any]:
    """Return a uvicorn logging config that also routes the tilawa loggers."""
    config = deepcopy(LOGGING_CONFIG)
    loggers = config.setdefault("loggers", {})
    loggers[LOGGER_NAME] = {
        "handlers": ["default"],
        "level": _level(debug),
        "propagate": False,
    }
    return config


def configure_cli_logging(debug: bool = False, console: Console | None = None) -> logging.Logger:
    """Send tilawa log records to stderr through rich for terminal commands."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=False,
    )
    logger.addHandler(handler)
    logger.setLevel(_level(debug))
    logger.propagate = False
    return logger


__all__ = [
    "LOGGER_NAME",
    "build_uvicorn_log_config",
    "configure_cli_logging",
]
