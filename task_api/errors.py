"""
Failure taxonomy and its HTTP rendering.

Route handlers and helpers raise the exceptions below; the handlers that
``register_error_handlers`` installs turn them into JSON envelopes.  The
mapping is total: Werkzeug HTTP errors, database constraint conflicts and
any unexpected exception are rendered too, so a client never receives an
HTML error page.

    AuthenticationFailure  401  "Unauthenticated"
    CredentialMismatch     401  "Invalid credentials"
    AuthorizationFailure   403  "Unauthorized" (or a caller-supplied variant)
    ResourceNotFound       404  "Resource not found"
    unmatched route        404  "Endpoint not found"
    MethodNotAllowed       405  "Method not allowed"
    IntegrityError         409  "Conflict"
    ValidationFailure      422  first field message + ``errors`` map
    anything else          500  "Server error"
"""

from __future__ import annotations

import logging

from flask import Flask, Response
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from . import db
from .responses import error_response

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for failures that map to a fixed status and message."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationFailure(ApiError):
    """Missing, malformed, revoked or expired bearer token."""

    status_code = 401
    default_message = "Unauthenticated"


class CredentialMismatch(ApiError):
    """Email/password pair did not match a user at login."""

    status_code = 401
    default_message = "Invalid credentials"


class AuthorizationFailure(ApiError):
    """The policy evaluator denied the action."""

    status_code = 403
    default_message = "Unauthorized"


class ResourceNotFound(ApiError):
    """A well-formed id that matches no row."""

    status_code = 404
    default_message = "Resource not found"


class ValidationFailure(ApiError):
    """
    One or more request fields failed validation.

    Carries every failing field at once; the envelope message is the first
    message of the first failing field.
    """

    status_code = 422
    default_message = "The given data was invalid."

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        first_message = next(
            (messages[0] for messages in errors.values() if messages), None
        )
        super().__init__(first_message)


def _render_api_error(error: ApiError) -> tuple[Response, int]:
    return error_response(
        error.message,
        error.status_code,
        errors=getattr(error, "errors", None),
    )


def _render_http_exception(error: HTTPException) -> tuple[Response, int]:
    if isinstance(error, NotFound):
        return error_response("Endpoint not found", 404)
    if isinstance(error, MethodNotAllowed):
        return error_response("Method not allowed", 405)
    return error_response(error.name, error.code or 500)


def _render_integrity_error(error: IntegrityError) -> tuple[Response, int]:
    db.session.rollback()
    logger.warning("Integrity error: %s", error.orig)
    return error_response("Conflict", 409)


def _render_unexpected(error: Exception) -> tuple[Response, int]:
    logger.exception("Unhandled error: %s", error)
    return error_response("Server error", 500)


def register_error_handlers(app: Flask) -> None:
    """Install the JSON envelope handlers on *app*."""
    app.register_error_handler(ApiError, _render_api_error)
    app.register_error_handler(HTTPException, _render_http_exception)
    app.register_error_handler(IntegrityError, _render_integrity_error)
    app.register_error_handler(Exception, _render_unexpected)
