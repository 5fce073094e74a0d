from __future__ import annotations
import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

"""
Centralized logging for the chatbot backend.

- init_logging(): configure the root logger once at startup
- get_logger(name): named logger, initializing logging lazily
- request id context var, filled by the HTTP middleware in main.py
- human readable console output plus a rotating JSON log file
"""


request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

# LogRecord attributes that are never copied into the JSON payload as "extra"
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "request_id", "request_id_part",
}


def set_request_id(rid: Optional[str]) -> None:
    request_id.set(rid)


def clear_request_id() -> None:
    request_id.set(None)


class RequestIDFilter(logging.Filter):
    """Stamp every record with the request id of the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id.get()
        return True


class ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        record.request_id_part = f" [request_id={rid}]" if rid else ""
        return super().format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, extras included."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except (TypeError, ValueError):
                payload[key] = str(value)
        return json.dumps(payload, ensure_ascii=False)


def _default_log_dir() -> Path:
    # backend/utils/logger.py -> repository root is two parents up
    return Path(os.getenv("LOG_DIR", Path(__file__).resolve().parents[2] / "logs"))


def init_logging(
    *,
    level: Optional[int] = None,
    log_dir: Optional[Path] = None,
    filename: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure the root logger. Calling it again replaces the handlers.

    LOG_LEVEL, LOG_DIR and LOG_FILE environment variables provide the defaults.
    Setting LOG_FILE to an empty string disables the JSON file handler.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    env_level = os.getenv("LOG_LEVEL", "INFO").upper()
    chosen_level = level if level is not None else getattr(logging, env_level, logging.INFO)
    root.setLevel(chosen_level)

    request_filter = RequestIDFilter()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(chosen_level)
    console.setFormatter(ConsoleFormatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s%(request_id_part)s",
        "%Y-%m-%d %H:%M:%S",
    ))
    console.addFilter(request_filter)
    root.addHandler(console)

    filename = filename if filename is not None else os.getenv("LOG_FILE", "app.log")
    if not filename:
        return

    log_dir = Path(log_dir) if log_dir is not None else _default_log_dir()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_dir / filename), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError:
        root.warning("Failed to initialize file handler for logging; continuing with console only", exc_info=True)
        return
    file_handler.setLevel(chosen_level)
    file_handler.setFormatter(JsonFormatter())
    file_handler.addFilter(request_filter)
    root.addHandler(file_handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not logging.getLogger().handlers:
        init_logging()
    return logging.getLogger(name)
