"""Structured logging configuration for the AstroChat backend.

Uses Python's standard logging module, configured through dictConfig, with
an optional JSON formatter for production log aggregation.
"""

import json
import logging
import logging.config
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from astrochat.app.core.config import Settings, settings


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs one JSON object per record with the standard fields, the source
    location, any request context fields and the remaining `extra` values.
    """

    CONTEXT_FIELDS = [
        "request_id",    # Request ID from X-Request-ID header
        "user_key",      # Truncated identity key
        "path",          # Request path
        "method",        # HTTP method
        "status_code",   # HTTP response status
        "duration_ms",   # Request duration in milliseconds
    ]

    _RESERVED = {
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "exc_info", "exc_text", "stack_info",
        "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "message",
        "asctime", "timestamp", "logger", "level", "source", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        record.message = record.getMessage()

        log_data: Dict[str, Any] = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        for field in self.CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None and value != "-":
                log_data[field] = value

        for key, value in record.__dict__.items():
            if key in self._RESERVED or key in self.CONTEXT_FIELDS:
                continue
            log_data.setdefault("extra", {})[key] = value

        if record.exc_info and record.exc_info != (None, None, None):
            log_data["exception"] = traceback.format_exception(*record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Adds default values for the request context fields.

    Keeps format strings that reference these fields from failing on records
    logged outside a request.
    """

    CONTEXT_DEFAULTS = {
        "request_id": None,
        "user_key": None,
        "path": None,
        "method": None,
        "status_code": None,
        "duration_ms": None,
    }

    def filter(self, record: logging.LogRecord) -> bool:
        for field, default in self.CONTEXT_DEFAULTS.items():
            if not hasattr(record, field):
                setattr(record, field, default)
        return True


def get_logging_config(config: Optional[Settings] = None) -> Dict[str, Any]:
    """Get logging configuration dictionary.

    Args:
        config: Settings to read log_level and log_format from; defaults to
            the module-level settings

    Returns:
        Logging configuration dict compatible with logging.config.dictConfig
    """
    config = config or settings
    log_format = getattr(config, "log_format", "text").lower()
    log_level = getattr(config, "log_level", "INFO").upper()

    formatters = {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
        "structured": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s - request_id=%(request_id)s - user_key=%(user_key)s"
        },
    }

    if log_format == "json":
        formatters["json"] = {
            "()": "astrochat.app.core.logging.JSONFormatter",
        }
        default_formatter = "json"
    else:
        default_formatter = "structured" if log_format == "structured" else "standard"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": default_formatter,
            "stream": sys.stdout,
            "filters": ["context"],
        },
        "error_console": {
            "class": "logging.StreamHandler",
            "level": "ERROR",
            "formatter": default_formatter,
            "stream": sys.stderr,
            "filters": ["context"],
        },
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": {
            "context": {
                "()": "astrochat.app.core.logging.ContextFilter",
            },
        },
        "handlers": handlers,
        "loggers": {
            "astrochat": {
                "level": log_level,
                "handlers": ["console", "error_console"],
                "propagate": False,
            },
            "uvicorn": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["console"],
        },
    }


def setup_logging(config: Optional[Settings] = None) -> None:
    """Configure logging for the application."""
    logging.config.dictConfig(get_logging_config(config))

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str = "astrochat") -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)


def short_key(user_key: Optional[str]) -> Optional[str]:
    """Truncate an identity key for log output."""
    if not user_key:
        return None
    return f"{user_key[:8]}..."


def get_log_context(
    request_id: Optional[str] = None,
    user_key: Optional[str] = None,
    **extra
) -> Dict[str, Any]:
    """Create a log context dictionary for use with the extra parameter.

    The identity key is truncated so full keys never reach the logs.

    Example:
        >>> logger.info(
        ...     "Question allowed",
        ...     extra=get_log_context(request_id="abc", user_key=key, used=3)
        ... )
    """
    context = {
        "request_id": request_id,
        "user_key": short_key(user_key),
    }
    context.update(extra)
    return {k: v for k, v in context.items() if v is not None}
