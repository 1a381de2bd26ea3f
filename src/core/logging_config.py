"""Logging setup.

Console output plus two rotating files under LOG_DIR: ``error.log`` with
errors only and ``combined.log`` with everything at LOG_LEVEL and above.
"""

import logging
import logging.config
from typing import Optional

from config import LOG_DIR, LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES, LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging handlers once per process.

    Args:
        level: Optional level name overriding LOG_LEVEL.
    """
    global _configured
    if _configured:
        return

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    level = (level or LOG_LEVEL).upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
                "error_file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "formatter": "default",
                    "filename": str(LOG_DIR / "error.log"),
                    "maxBytes": LOG_FILE_MAX_BYTES,
                    "backupCount": LOG_FILE_BACKUP_COUNT,
                    "encoding": "utf-8",
                    "level": "ERROR",
                },
                "combined_file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "formatter": "default",
                    "filename": str(LOG_DIR / "combined.log"),
                    "maxBytes": LOG_FILE_MAX_BYTES,
                    "backupCount": LOG_FILE_BACKUP_COUNT,
                    "encoding": "utf-8",
                },
            },
            "root": {
                "level": level,
                "handlers": ["console", "error_file", "combined_file"],
            },
        }
    )
    _configured = True


def mask(value: Optional[str], keep: int = 3) -> str:
    """Mask a sensitive value (cpf, email) for log output."""
    if not value:
        return "<empty>"
    return value[:keep] + "***"
