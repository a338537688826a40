"""Structured logging configuration."""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Request id of the HTTP request being served, empty outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Attributes every LogRecord carries; anything else came in via extra={...}
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    {"timestamp": "...", "level": "INFO", "logger": "article_tags.services.tag",
     "message": "Tag deleted", "request_id": "...", "extra": {"tag_id": 3}}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            payload["request_id"] = request_id

        extra = _extra_fields(record)
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
        request_id = request_id_var.get()
        prefix = f"[{request_id[:8]}] " if request_id else ""

        line = f"{timestamp} | {record.levelname:8} | {prefix}{record.name}: {record.getMessage()}"

        extra = _extra_fields(record)
        if extra:
            line += " " + " ".join(f"{k}={v}" for k, v in extra.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def setup_logging(log_level: str = "INFO", log_format: str = "json", sql_echo: bool = False) -> None:
    """
    Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: "json" for structured output, anything else for plain text
        sql_echo: let SQLAlchemy engine logs through at INFO
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format.lower() == "json" else SimpleFormatter())
    root_logger.addHandler(handler)

    # Third-party noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the given name (usually __name__)."""
    return logging.getLogger(name)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())
