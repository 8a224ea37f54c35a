# utils/logger.py
"""
Logging for flowgate: one package logger, one child per module.

stdout carries reports, so log records only ever go to stderr and, when a log
directory is given, to a rotating ``flowgate.log`` inside it.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

ROOT_LOGGER = "flowgate"
LOG_FILE = "flowgate.log"

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# red for ERROR and up, yellow for WARNING, green for INFO
_COLORS = (
    (logging.ERROR, "\033[91m"),
    (logging.WARNING, "\033[93m"),
    (logging.INFO, "\033[92m"),
)


def level_from_env(default: int = logging.WARNING) -> int:
    """LOG_LEVEL by name (DEBUG, INFO, ...); unknown or unset -> default."""
    name = os.getenv("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else None
    return level if isinstance(level, int) else default


class _ColorFormatter(logging.Formatter):
    def __init__(self, stream) -> None:
        super().__init__(fmt=_FORMAT, datefmt=_DATEFMT)
        self._tty = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self._tty:
            return text
        for threshold, color in _COLORS:
            if record.levelno >= threshold:
                return f"{color}{text}\033[0m"
        return text


def init_logger(
    level: int | None = None,
    log_dir: str | Path | None = None,
    file_max_mb: int = 5,
    file_backup: int = 3,
) -> logging.Logger:
    """
    (Re)configure the package logger. Previous handlers are closed, so the
    CLI can call this again once it has parsed --verbose / --log-dir.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False
    logger.setLevel(level if level is not None else level_from_env())

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(_ColorFormatter(sys.stderr))
    logger.addHandler(sh)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / LOG_FILE),
            maxBytes=file_max_mb * 1024 * 1024,
            backupCount=file_backup,
            encoding="utf-8",
        )
        fh.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
        logger.addHandler(fh)

    return logger


def get_logger(child: str) -> logging.Logger:
    """Child of the package logger; configures the package logger on first use."""
    base = logging.getLogger(ROOT_LOGGER)
    if not base.handlers:
        init_logger()
    return base.getChild(child)
