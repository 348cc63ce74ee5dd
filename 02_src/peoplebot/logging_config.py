"""Structured logging configuration for the people-search bot."""

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Third-party loggers that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        # Messenger user the record is about, passed as extra={"user_id": ...}
        user_id = getattr(record, "user_id", None)
        if user_id is not None:
            log_data["user_id"] = user_id

        if hasattr(record, "context"):
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    console_format: str | None = None,
) -> None:
    """
    Configure root logging for the webhook process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
                   Defaults to LOG_LEVEL env var or INFO.
        log_file: Rotating JSON log file. Defaults to 04_logs/app.log;
                  an empty LOG_FILE env var disables the file handler.
        console_format: "json" or "text". Defaults to LOG_FORMAT env var or json.
    """
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    console_format = (console_format or os.getenv("LOG_FORMAT", "json")).lower()

    if log_file is None:
        log_file = os.getenv("LOG_FILE", str(DEFAULT_LOG_PATH))

    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "text" if console_format == "text" else "json",
            "stream": "ext://sys.stdout",
        },
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": "peoplebot.logging_config.JSONFormatter"},
                "text": {"format": TEXT_FORMAT},
            },
            "handlers": handlers,
            "loggers": {
                name: {"level": "WARNING"} for name in NOISY_LOGGERS
            },
            "root": {
                "level": log_level,
                "handlers": list(handlers),
            },
        }
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with __name__."""
    return logging.getLogger(name)
