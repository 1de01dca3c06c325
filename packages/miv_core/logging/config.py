import logging
import logging.config
import os
from typing import Any, Dict, Optional


BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../"))
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s"


def _rotating_handler(filename: str, level: str) -> Dict[str, Any]:
    # One file per day, a month of history
    return {
        "level": level,
        "class": "logging.handlers.TimedRotatingFileHandler",
        "filename": filename,
        "when": "midnight",
        "interval": 1,
        "backupCount": 30,
        "encoding": "utf-8",
        "formatter": "standard",
    }


def build_logging_config(log_dir: str, console_level: str = "INFO") -> Dict[str, Any]:
    """
    dictConfig for the 'miv' logger tree.
    Everything goes to miv.log, errors are duplicated into miv.error.log.
    """
    app_dir = os.path.join(log_dir, "app")
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "console": {
                "level": console_level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
            "file_app": _rotating_handler(os.path.join(app_dir, "miv.log"), "DEBUG"),
            "file_error": _rotating_handler(os.path.join(app_dir, "miv.error.log"), "ERROR"),
        },
        "loggers": {
            "miv": {
                "handlers": ["console", "file_app", "file_error"],
                "level": "DEBUG",
                "propagate": False,
            },
        },
    }


_configured = False


def setup_logging(log_dir: Optional[str] = None):
    """
    Apply logging configuration.
    MIV_LOG_DIR and MIV_LOG_LEVEL override the defaults (<project>/logs, INFO).
    """
    global _configured
    log_dir = log_dir or os.environ.get("MIV_LOG_DIR") or os.path.join(BASE_DIR, "logs")
    os.makedirs(os.path.join(log_dir, "app"), exist_ok=True)
    logging.config.dictConfig(
        build_logging_config(log_dir, os.environ.get("MIV_LOG_LEVEL", "INFO").upper())
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the 'miv' hierarchy, configuring logging on first use."""
    if not _configured:
        setup_logging()
    if name != "miv" and not name.startswith("miv."):
        name = f"miv.{name}"
    return logging.getLogger(name)
