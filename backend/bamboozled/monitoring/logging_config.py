"""
Logging setup for the Bamboozled backend.

Every record carries the correlation id of the HTTP request or WebSocket
connection it belongs to, and the chat player once a session has joined.
"""

import inspect
import json
import logging
import logging.config
import time
import traceback
import uuid
from contextvars import ContextVar
from functools import wraps
from typing import Any, Dict, Optional

NO_CORRELATION_ID = "no-correlation-id"

correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
player_id: ContextVar[Optional[str]] = ContextVar("player_id", default=None)

# LogRecord attributes that are not `extra=` fields
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "correlation_id", "player_id"
}


class CorrelationFilter(logging.Filter):
    """Stamps records with the current correlation and player ids."""

    def filter(self, record):
        record.correlation_id = correlation_id.get() or NO_CORRELATION_ID
        record.player_id = player_id.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        player = getattr(record, "player_id", None)
        if player:
            entry["player_id"] = player

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry.update({
            key: value for key, value in record.__dict__.items() if key not in _RECORD_ATTRS
        })
        return json.dumps(entry, default=str)


def _logger_config(level: str) -> Dict[str, Any]:
    return {"level": level, "handlers": ["console"], "propagate": False}


def setup_logging(log_level: str = "INFO", enable_json: bool = True) -> None:
    """
    Configure application logging.

    Args:
        log_level: Level for the ``bamboozled`` loggers and the root logger
        enable_json: JSON lines instead of the plain console format
    """
    level = log_level.upper()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JSONFormatter},
            "console": {
                "format": "%(asctime)s %(levelname)-8s %(name)s [%(correlation_id)s] %(message)s",
            },
        },
        "filters": {"context": {"()": CorrelationFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if enable_json else "console",
                "filters": ["context"],
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "bamboozled": _logger_config(level),
            "uvicorn": _logger_config("INFO"),
            "uvicorn.access": _logger_config("WARNING"),
            "sqlalchemy.engine": _logger_config("WARNING"),
        },
        "root": {"level": level, "handlers": ["console"]},
    })


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``bamboozled`` namespace."""
    return logging.getLogger(f"bamboozled.{name}")


def set_correlation_id(request_id: Optional[str] = None) -> str:
    """Use ``request_id`` (or a fresh uuid4) for records in the current context."""
    value = request_id or str(uuid.uuid4())
    correlation_id.set(value)
    return value


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def set_player_id(user_id: Optional[str]) -> None:
    player_id.set(user_id)


def _log_timing(func, started: float, error: Optional[BaseException] = None) -> None:
    logger = get_logger(f"performance.{func.__module__}.{func.__name__}")
    extra = {
        "operation": func.__qualname__,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        "status": "error" if error else "success",
    }
    if error is None:
        logger.info(f"{func.__qualname__} finished", extra=extra)
        return

    extra["error_type"] = type(error).__name__
    extra["error_message"] = str(error)
    logger.error(f"{func.__qualname__} failed", extra=extra)


def log_performance(func):
    """Log the duration of a sync or async call, and its failure if it raises."""

    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _log_timing(func, started, e)
                raise
            _log_timing(func, started)
            return result

        return async_wrapper

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _log_timing(func, started, e)
            raise
        _log_timing(func, started)
        return result

    return sync_wrapper
