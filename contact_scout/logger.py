# === FILE: contact_scout/logger.py ===
"""Logging setup of **ContactScout**.

Every module logs through a child of the ``ContactScout`` logger::

    from contact_scout.logger import get_logger
    log = get_logger("crawler")      # -> "ContactScout.crawler"

so that one :func:`configure` call (made by the CLI) decides level, format
and destination for the whole engine. Output goes to stdout and, when a
path is given, to a rotating log file as well.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "ContactScout"
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _build_handlers(log_file: Path | str | None, fmt: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the ``ContactScout`` logger.

    Parameters
    ----------
    level
        Numeric or textual level (``"DEBUG"`` …) applied to all components.
    log_file
        Rotating log file (5 MB × 3); *None* logs to stdout only.
    log_format
        Format string shared by every handler.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(log_file, log_format):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Positional shortcut of :func:`configure`, used by the CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format)


def get_logger(component: str) -> logging.Logger:
    """Return the child logger ``ContactScout.<component>``."""
    return logging.getLogger(f"{_LOGGER_NAME}.{component}")


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger"]
