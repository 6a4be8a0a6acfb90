from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .core import DATA_DIR

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "hypercorn.access")

_INITIALIZED = False


def _resolve_log_file(log_path: Optional[Path]) -> Path:
    if log_path is not None:
        return log_path
    configured = os.getenv("SMART_CALENDAR_LOG_FILE")
    return Path(configured) if configured else DATA_DIR / "smart_calendar.log"


def configure_logging(level: Optional[str] = None, *, log_path: Optional[Path] = None) -> None:
    """Configure application-wide logging with a rotating file and the console.

    ``level`` defaults to ``SMART_CALENDAR_LOG_LEVEL`` (INFO when unset). Calling
    this more than once is a no-op.
    """

    global _INITIALIZED
    if _INITIALIZED:
        return

    resolved_level = (level or os.getenv("SMART_CALENDAR_LOG_LEVEL", "INFO")).upper()
    log_file = _resolve_log_file(log_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(str(log_file), maxBytes=1_000_000, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(getattr(logging, resolved_level, logging.INFO))
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging configured at %s. Output file: %s", resolved_level, log_file)


__all__ = ["configure_logging"]
