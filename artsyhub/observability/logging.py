"""Structured JSON logging with request and user context."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from flask import g, has_request_context, request

_CONTEXT_FIELDS = ("request_id", "path", "method", "remote_addr", "user_id")


class RequestContextFilter(logging.Filter):
    """Attach request-scoped metadata to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in _CONTEXT_FIELDS:
            setattr(record, name, None)
        if not has_request_context():
            return True
        record.request_id = getattr(g, "request_id", None)
        record.path = request.path
        record.method = request.method
        record.remote_addr = request.headers.get("X-Forwarded-For", request.remote_addr)
        # Set by the Flask-Login request loader once a session token verifies
        identity = getattr(g, "identity", None)
        record.user_id = getattr(identity, "user_id", None)
        return True


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            payload[name] = getattr(record, name, None)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_structured_logging(app) -> None:
    """Attach a JSON stdout handler to the root logger once per process."""
    root = logging.getLogger()
    already_configured = any(
        isinstance(getattr(handler, "formatter", None), JsonFormatter)
        for handler in root.handlers
    )
    if already_configured:
        return

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(JsonFormatter())
    stream_handler.addFilter(RequestContextFilter())
    stream_handler.setLevel(logging.DEBUG if app.config.get("DEBUG") else logging.INFO)
    root.addHandler(stream_handler)
