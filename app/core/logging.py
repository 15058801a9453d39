"""
app/core/logging.py

Purpose: Logging configuration

- JSON lines in production, colored single lines in development
- Per-task context (email, meal_id, request_id, badge) attached to
  every record emitted inside a LogContext block
- All application loggers live under the "mealmate" namespace
"""

import logging
import sys
import json
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

from app.core.config import settings

CONTEXT_FIELDS = ("email", "meal_id", "request_id", "badge")

# Scoped to the running asyncio task, so concurrent requests never share it
_log_context: ContextVar[Dict[str, Any]] = ContextVar("mealmate_log_context", default={})


class ContextFilter(logging.Filter):
    """Copies the active LogContext onto each record (explicit extra wins)."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line for the log shipper.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        log_data.update(_context_of(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):

    colors = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    reset = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.colors.get(record.levelname, self.reset)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}[{timestamp}] {record.levelname:<8}{self.reset} {record.name}: {record.getMessage()}"

        context = _context_of(record)
        if context:
            line += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def setup_logging():
    """
    Installs a single stdout handler on the root logger.
    Safe to call more than once.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(StructuredFormatter() if settings.is_production else DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for noisy in ("httpx", "httpcore", "motor", "pymongo", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger("mealmate")
    logger.info(f"Logging configured ({settings.ENVIRONMENT}, level {settings.LOG_LEVEL})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Logger under the "mealmate" namespace, e.g. get_logger(__name__).
    """
    return logging.getLogger(f"mealmate.{name}")


class LogContext:
    """
    Adds fields to every log record emitted inside the block.

    Usage:
        with LogContext(email="a@b.com", meal_id="65f..."):
            logger.info("Meal liked")

    Blocks nest; inner values shadow outer ones until the inner block exits.
    """

    def __init__(self, **kwargs):
        self.context = {k: v for k, v in kwargs.items() if v is not None}
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
