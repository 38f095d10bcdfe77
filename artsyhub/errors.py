"""Domain error taxonomy and its mapping onto HTTP responses."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import jsonify

logger = logging.getLogger(__name__)


class ArtsyHubError(Exception):
    """Base class for errors converted to JSON at the request boundary."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None,
                 status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        self.field = field
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def payload(self) -> Dict[str, Any]:
        # Field errors are keyed by the offending field name
        key = self.field or "error"
        return {key: self.message}


class ValidationError(ArtsyHubError):
    status_code = 400
    default_message = "Invalid request"


class Conflict(ArtsyHubError):
    status_code = 409
    default_message = "Resource already exists"


class InvalidCredentials(ArtsyHubError):
    status_code = 400
    default_message = "Username or password is incorrect."

    def __init__(self) -> None:
        super().__init__(field="password")


class Unauthenticated(ArtsyHubError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(ArtsyHubError):
    status_code = 404
    default_message = "Not found"


class UpstreamError(ArtsyHubError):
    """A call to the Artsy API failed."""

    status_code = 500
    default_message = "Upstream request failed"

    def __init__(self, message: Optional[str] = None, *, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class UpstreamNotFound(UpstreamError):
    """The Artsy API answered 404 for the requested resource."""

    status_code = 404
    default_message = "Not found"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, upstream_status=404)


def register_error_handlers(app) -> None:
    """Convert domain errors (and anything unexpected) into JSON bodies."""

    @app.errorhandler(ArtsyHubError)
    def _handle_domain_error(exc: ArtsyHubError):
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc.message, exc_info=exc)
        return jsonify(exc.payload()), exc.status_code

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        from werkzeug.exceptions import HTTPException

        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description or exc.name}), exc.code
        logger.error("Unhandled error: %s", exc, exc_info=True)
        return jsonify({"error": "Internal Server Error"}), 500


__all__ = [
    "ArtsyHubError",
    "ValidationError",
    "Conflict",
    "InvalidCredentials",
    "Unauthenticated",
    "NotFound",
    "UpstreamError",
    "UpstreamNotFound",
    "register_error_handlers",
]
