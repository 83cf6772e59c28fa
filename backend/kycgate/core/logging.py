"""
core/logging.py

Logging setup for kycgate.
- Every `kycgate.*` logger writes to the console and a rotating logs/kycgate.log
- ERROR and above are also kept in logs/kycgate-error.log
- Reviewer decisions (`kycgate.review.*`) are kept in logs/kycgate-review.log,
  the audit trail of who approved or rejected what
- Colored console output when `colorlog` is installed
- Level comes from settings.LOG_LEVEL; third-party loggers stay at WARNING

Call `init_logging()` once, before the app is created.
"""

import os
from logging.config import dictConfig
from typing import Any

from kycgate.core.config import settings

# Check for colorlog availability
try:
    import colorlog  # noqa: F401

    COLORLOG_AVAILABLE = True
except ImportError:
    COLORLOG_AVAILABLE = False

LOG_FORMAT = "[%(asctime)s] kycgate %(levelname)s [%(name)s] %(message)s"
REVIEW_LOG_FORMAT = "[%(asctime)s] review %(levelname)s %(message)s"
KYCGATE_HANDLERS = ["kycgate_console", "kycgate_file", "kycgate_errors"]


def build_logging_config(log_dir: str, level: str) -> dict[str, Any]:
    """Builds the dictConfig payload for the given log directory and level."""
    formatters: dict[str, Any] = {
        "kycgate": {"format": LOG_FORMAT},
        "review": {"format": REVIEW_LOG_FORMAT},
    }
    if COLORLOG_AVAILABLE:
        formatters["kycgate_color"] = {
            "()": "colorlog.ColoredFormatter",
            "format": f"%(log_color)s{LOG_FORMAT}",
            "log_colors": {
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": {
            "kycgate_console": {
                "class": "logging.StreamHandler",
                "formatter": "kycgate_color" if COLORLOG_AVAILABLE else "kycgate",
            },
            "kycgate_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, "kycgate.log"),
                "maxBytes": 1 * 1024 * 1024,  # 1MB
                "backupCount": 5,
                "formatter": "kycgate",
                "encoding": "utf-8",
            },
            "kycgate_errors": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, "kycgate-error.log"),
                "maxBytes": 1 * 1024 * 1024,
                "backupCount": 5,
                "level": "ERROR",
                "formatter": "kycgate",
                "encoding": "utf-8",
            },
            "review_audit": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, "kycgate-review.log"),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 10,
                "level": "INFO",
                "formatter": "review",
                "encoding": "utf-8",
            },
        },
        "loggers": {
            # Handlers sit on the root; kycgate records reach them by propagation.
            "kycgate": {"level": level.upper()},
            "kycgate.review": {"handlers": ["review_audit"]},
            "uvicorn": {"level": "WARNING"},
            "sqlalchemy": {"level": "WARNING"},
        },
        "root": {
            "level": "WARNING",
            "handlers": KYCGATE_HANDLERS,
        },
    }


def init_logging() -> None:
    """Initializes logging from settings, creating the log directory if needed."""
    log_dir = str(settings.log_path)
    os.makedirs(log_dir, exist_ok=True)
    dictConfig(build_logging_config(log_dir, settings.LOG_LEVEL))
