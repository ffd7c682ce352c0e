"""JSON logging for the relay: console always, rotating file unless disabled."""

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH, resolve_dir

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Values of LOG_FILE that turn the file handler off
_DISABLED = {"-", "none", "off"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Relay modules attach request details with extra={"context": {...}};
    those land under the "context" key. Values that are not JSON types
    (datetimes, paths) are stringified.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def resolve_log_file(value: str | None) -> Path | None:
    """Resolve LOG_FILE. Empty means the default path, "-"/"none"/"off" mean no file."""
    if value is not None and value.strip().lower() in _DISABLED:
        return None
    return resolve_dir(value, DEFAULT_LOG_PATH)


def build_logging_config(log_level: str, log_file: Path | None) -> dict:
    """dictConfig for the relay. Console handler always, file handler if log_file."""
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(log_file),
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUPS,
            "formatter": "json",
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "relay.logging_config.JSONFormatter"},
        },
        "handlers": handlers,
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the relay process.

    Args:
        log_level: Log level name. Defaults to LOG_LEVEL env var or INFO.
        log_file: Log file path. Defaults to LOG_FILE env var, then logs/app.log.
                  "-", "none" or "off" log to the console only.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")
    if log_file is None:
        log_file = os.getenv("LOG_FILE")

    path = resolve_log_file(log_file)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_level, path))


def get_logger(name: str) -> logging.Logger:
    """Get a logger (name is typically the module's __name__)."""
    return logging.getLogger(name)
