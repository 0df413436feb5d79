"""
JSON response envelope.

Every response body produced by the API, success or failure, has the
same shape::

    {"success": bool, "message": str, "data": <payload or null>}

Validation failures additionally carry ``"errors": {field: [messages]}``.
Route handlers use ``success_response`` / ``created_response``; failures
are rendered by the handlers in :mod:`task_api.errors`.
"""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify


def envelope(
    success: bool,
    message: str,
    data: Any = None,
    errors: dict[str, list[str]] | None = None,
) -> dict[str, Any]:
    """Build the envelope dictionary; ``errors`` is omitted when empty."""
    body: dict[str, Any] = {"success": success, "message": message, "data": data}
    if errors:
        body["errors"] = errors
    return body


def success_response(
    data: Any = None, message: str = "Success", status_code: int = 200
) -> tuple[Response, int]:
    return jsonify(envelope(True, message, data)), status_code


def created_response(
    data: Any = None, message: str = "Resource created successfully"
) -> tuple[Response, int]:
    return success_response(data, message, status_code=201)


def error_response(
    message: str,
    status_code: int,
    errors: dict[str, list[str]] | None = None,
) -> tuple[Response, int]:
    return jsonify(envelope(False, message, None, errors)), status_code
