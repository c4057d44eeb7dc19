"""Central logging configuration for the Balance focus service."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from balance.config import get_settings

_configured = False


def _default_config(log_dir: Path, level: str, debug: bool = False) -> dict:
    log_path = log_dir / "balance.log"
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_path),
                "encoding": "utf-8",
                "formatter": "standard",
                "level": level,
            },
        },
        "loggers": {
            # httpx logs every request URL at INFO
            "httpx": {"level": "WARNING"},
            # SQL statements only when DEBUG is on
            "sqlalchemy.engine": {"level": "INFO" if debug else "WARNING"},
        },
        "root": {
            "level": level,
            "handlers": ["console", "file"],
        },
    }


def configure_logging() -> None:
    """Configure application logging once per process."""

    global _configured
    if _configured:
        return

    try:
        settings = get_settings()
        log_dir = settings.log_dir
        level = settings.log_level
        debug = settings.debug
    except ValidationError:
        # Environment may be incomplete when imported from tooling.
        log_dir = Path("logs")
        level = "INFO"
        debug = False
    log_dir.mkdir(parents=True, exist_ok=True)

    dictConfig(_default_config(log_dir, level, debug=debug))
    logging.getLogger(__name__).debug("Logging configured at %s", level)
    _configured = True
