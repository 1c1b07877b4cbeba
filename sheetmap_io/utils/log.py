"""Logging helpers for the sheetmap_io package."""

# Module responsibilities:
# - Configure the ``sheetmap_io`` logger once with a rotating file and a quiet console handler.
# - Render the ``extra={...}`` context attached by loaders and stores as ``key=value`` pairs.

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from .paths import resolve_base

PACKAGE_LOGGER = "sheetmap_io"
LOG_FILE_NAME = "sheetmap_io.log"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_configured = False


class ContextFormatter(logging.Formatter):
    """Formatter appending the record's ``extra`` context after the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value for key, value in vars(record).items() if key not in _RECORD_FIELDS
        }
        if not context:
            return line
        rendered = " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
        return f"{line} | {rendered}"


def _log_path(log_dir: Optional[Path]) -> Path:
    directory = log_dir or resolve_base() / "logs"
    directory.mkdir(parents=True, exist_ok=True)
    return directory / LOG_FILE_NAME


def _configure(log_dir: Optional[Path] = None) -> None:
    global _configured
    if _configured:
        return

    formatter = ContextFormatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.handlers.RotatingFileHandler(
        _log_path(log_dir), maxBytes=2_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.INFO)
    package_logger.addHandler(file_handler)
    package_logger.addHandler(console_handler)
    package_logger.propagate = False

    _configured = True


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return ``sheetmap_io.<name>``, configuring the package logger on first use.

    Args:
        name: Suffix under the package logger, usually the module name.
        log_dir: Directory for ``sheetmap_io.log``; defaults to ``<SHEETMAP_HOME>/logs``.
    """

    _configure(log_dir)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
