"""Logging setup."""

import sys
from logging.config import dictConfig

from smart_notes.config import settings


def setup_logging() -> None:
    """
    Configure stdout logging as `timestamp | level | module | message`.

    Call once at application startup.
    """
    log_level = settings.log_level.upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
            },
            "root": {"level": log_level, "handlers": ["console"]},
            "loggers": {
                "smart_notes": {
                    "level": log_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
                "uvicorn": {"handlers": ["console"], "level": "INFO", "propagate": False},
                "uvicorn.access": {
                    "handlers": ["console"],
                    "level": "INFO",
                    "propagate": False,
                },
                "sqlalchemy.engine": {
                    "level": "INFO" if settings.debug and log_level == "DEBUG" else "WARNING",
                    "handlers": ["console"],
                    "propagate": False,
                },
                "httpx": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            },
        }
    )
