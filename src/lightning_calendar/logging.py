from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import get_settings
from .config.paths import LOG_FILE, ensure_log_dir

PACKAGE_LOGGER = "lightning_calendar"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_INITIALIZED = False


def configure_logging(
    level: Optional[str] = None,
    *,
    log_path: Optional[Path] = None,
    console: bool = True,
) -> logging.Logger:
    """Attach a rotating file handler (and optionally a console handler) to the package logger.

    Only the ``lightning_calendar`` logger is touched; the root logger is left
    alone. Repeated calls are no-ops.
    """

    global _INITIALIZED
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _INITIALIZED:
        return package_logger

    if log_path is None:
        ensure_log_dir()
        log_path = LOG_FILE
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [RotatingFileHandler(str(log_path), maxBytes=1_000_000, backupCount=5)]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    resolved = (level or get_settings().logging.level).upper()
    package_logger.setLevel(getattr(logging, resolved, logging.INFO))

    _INITIALIZED = True
    package_logger.debug("Logging configured at %s. Output file: %s", resolved, log_path)
    return package_logger


__all__ = ["configure_logging"]
