"""
Request authentication for protected endpoints.

``require_auth`` reads ``Authorization: Bearer <token>``, validates it with
the token issuer and passes the resulting ``AuthContext`` to the view as
its first positional argument.  Views therefore receive the caller
explicitly instead of reading it from request globals::

    @tasks_bp.route("/tasks", methods=["POST"])
    @require_auth
    def create_task(auth: AuthContext):
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import request

from .errors import AuthenticationFailure
from .tokens import AuthContext, validate_token


def extract_bearer_token() -> str | None:
    """
    Return the token from the ``Authorization`` header.

    Returns ``None`` if the header is absent, uses another scheme, or
    carries an empty token.
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def authenticate_request() -> AuthContext:
    """Validate the current request's bearer token or raise a 401 failure."""
    token = extract_bearer_token()
    if token is None:
        raise AuthenticationFailure()
    return validate_token(token)


def require_auth(view_func: Callable):
    """
    Decorator that enforces bearer-token authentication.

    On failure the request ends with a 401 envelope before the view runs.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        auth = authenticate_request()
        return view_func(auth, *args, **kwargs)

    return wrapper
