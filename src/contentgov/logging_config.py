"""Logging setup for contentgov.

Provides:
- ``redact_secrets`` - masks tokens and secrets before they reach a handler.
- ``ContentGovFormatter`` - plain or JSON lines carrying ``request_id``.
- ``RequestLoggerAdapter`` / ``get_request_logger`` - bind a request id to
  every record logged during one engine operation.
- ``setup_logging`` - configure the root logger from ``Settings``.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from contentgov.config import Settings

SECRET_PATTERNS = [
    r'(?i)(?:password|secret|token|api[_-]?key|pat[_-]?secret)\s*[:=]\s*["\']?([^"\'\s,}]+)',
    r"(?i)(?:bearer|basic)\s+([a-zA-Z0-9._+/=-]+)",
    r'(?i)x-tableau-auth\s*[:=]\s*["\']?([^"\'\s,}]+)',
]

_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName", "levelname",
        "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
        "processName", "relativeCreated", "thread", "threadName", "exc_info",
        "exc_text", "stack_info", "taskName", "request_id",
    }
)


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Replace secret values matched by ``SECRET_PATTERNS``."""
    if not isinstance(text, str):
        return text
    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result)
    return result


class ContentGovFormatter(logging.Formatter):
    """Formats records as a plain line or a JSON object, redacting secrets."""

    def __init__(self, json_format: bool = False, redact: bool = True) -> None:
        super().__init__()
        self.json_format = json_format
        self.redact = redact

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if self.redact:
            message = redact_secrets(message)
        request_id = getattr(record, "request_id", None)

        if not self.json_format:
            parts = [
                f"[{self.formatTime(record, self.datefmt)}]",
                record.levelname,
                record.name,
            ]
            if request_id:
                parts.append(f"request_id={request_id}")
            line = " ".join(parts) + f": {message}"
            if record.exc_info:
                line += "\n" + self.formatException(record.exc_info)
            return line

        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }
        if request_id:
            data["request_id"] = request_id
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                data[key] = redact_secrets(str(value)) if self.redact else value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str, ensure_ascii=False)


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Adds ``request_id`` to every record."""

    def __init__(self, logger: logging.Logger, request_id: str | None = None) -> None:
        super().__init__(logger, {})
        self.request_id = request_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        request_id = kwargs.pop("request_id", self.request_id)
        if request_id:
            extra["request_id"] = request_id
        kwargs["extra"] = extra
        return msg, kwargs


def get_request_logger(name: str, request_id: str | None = None) -> RequestLoggerAdapter:
    return RequestLoggerAdapter(logging.getLogger(name), request_id=request_id)


def setup_logging(settings: Settings) -> None:
    """Configure the root logger with one stream handler."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    if settings.debug:
        level = logging.DEBUG

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ContentGovFormatter(json_format=settings.log_json))
    root.addHandler(handler)

    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


__all__ = [
    "ContentGovFormatter",
    "RequestLoggerAdapter",
    "get_request_logger",
    "redact_secrets",
    "setup_logging",
]
