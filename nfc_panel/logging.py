"""Logging setup for the command line entry points."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# HTTP chatter that stays at WARNING unless network logging is switched on.
NETWORK_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.server")


def resolve_level(level: str) -> int:
    """Map a ``[logging] level`` value to a logging level, defaulting to INFO."""

    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: str = "INFO",
    *,
    log_path: Optional[Path] = None,
    log_network: bool = False,
) -> None:
    """Send records to stderr and, when ``log_path`` is set, to that file too.

    Calling it again replaces the handlers installed by the previous call.
    """

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=resolve_level(level), format=LOG_FORMAT, handlers=handlers, force=True
    )
    logging.captureWarnings(True)

    network_level = logging.NOTSET if log_network else logging.WARNING
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)
