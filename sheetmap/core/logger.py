from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .settings import get_settings

APP_LOGGER = "sheetmap"

_LOGGER: logging.Logger | None = None


def _level(name: str) -> int:
    value = getattr(logging, name.upper(), None)
    return value if isinstance(value, int) else logging.INFO


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the ``sheetmap`` logger, writing to <SHEETMAP_HOME>/logs/app.log.

    Service modules log through ``logging.getLogger(__name__)`` and reach these
    handlers by propagation. The level comes from ``SHEETMAP_LOG_LEVEL``; only
    warnings and errors are echoed to stderr so command output stays clean.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    settings = get_settings()
    target = Path(log_dir) if log_dir is not None else settings.home / "logs"
    target.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers: list[logging.Handler] = [
        RotatingFileHandler(target / "app.log", maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"),
    ]
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.WARNING)
    handlers.append(console)

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(_level(settings.log_level))
    logger.propagate = False
    for handler in handlers:
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    _LOGGER = logger
    return logger
