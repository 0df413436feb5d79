"""
Bearer token issuing, validation and revocation.

Tokens are HS256-signed JWTs whose ``jti`` claim names a row in the
``access_tokens`` table.  The signature keeps clients from forging ids; the
row is what makes a token live.  Logging out deletes the row, so a revoked
token fails validation even though its signature is still good.

Token claims:
    - ``sub`` -- id of the owning user, as a string.
    - ``jti`` -- random 64-character hex id of the ``AccessToken`` row.
    - ``iat`` -- issued-at timestamp (UTC epoch seconds).
    - ``exp`` -- only present when ``TOKEN_EXPIRY_HOURS`` is configured.

Each operation is a single statement against the token table, so a token
is always observed as either fully valid or fully revoked.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import jwt
from flask import current_app
from sqlalchemy import delete, select

from . import db
from .errors import AuthenticationFailure
from .models import AccessToken, User, utcnow

REQUIRED_TOKEN_CLAIMS = ["sub", "jti", "iat"]
DEFAULT_TOKEN_NAME = "auth_token"


@dataclass(frozen=True)
class AuthContext:
    """The resolved caller of a request and the token it presented."""

    user: User
    token: AccessToken


def _signing_key() -> str:
    return current_app.config["JWT_SECRET_KEY"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def issue_token(user: User, name: str = DEFAULT_TOKEN_NAME) -> str:
    """
    Create and persist a new token bound to *user*.

    A user may hold any number of live tokens, one per session.

    Args:
        user: A persisted user (must already have an id).
        name: Label stored with the binding.

    Returns:
        The compact JWT string to hand to the client.
    """
    if user.id is None:
        raise ValueError("user must be persisted before a token is issued")

    record = AccessToken(user_id=user.id, jti=secrets.token_hex(32), name=name)
    db.session.add(record)
    db.session.commit()

    now = utcnow()
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "jti": record.jti,
        "iat": int(now.timestamp()),
    }
    expiry_hours = current_app.config.get("TOKEN_EXPIRY_HOURS")
    if expiry_hours:
        payload["exp"] = int((now + timedelta(hours=int(expiry_hours))).timestamp())

    return jwt.encode(payload, _signing_key(), algorithm=_algorithm())


def validate_token(token: str) -> AuthContext:
    """
    Resolve *token* to its user and binding.

    Raises:
        AuthenticationFailure: If the token is malformed, badly signed,
            expired, or its binding no longer exists.
    """
    try:
        claims = jwt.decode(
            token,
            _signing_key(),
            algorithms=[_algorithm()],
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except jwt.InvalidTokenError as exc:
        raise AuthenticationFailure() from exc

    record = db.session.scalar(select(AccessToken).where(AccessToken.jti == claims["jti"]))
    if record is None or str(record.user_id) != str(claims["sub"]):
        raise AuthenticationFailure()
    return AuthContext(user=record.user, token=record)


def revoke_token(jti: str) -> bool:
    """
    Delete the binding for *jti*.

    Returns:
        ``True`` if a live token was revoked, ``False`` if it was already
        gone.  Revoking twice is not an error.
    """
    result = db.session.execute(delete(AccessToken).where(AccessToken.jti == jti))
    db.session.commit()
    return result.rowcount > 0


def revoke_all_tokens(user: User) -> int:
    """Delete every binding for *user* without committing; return the count."""
    result = db.session.execute(
        delete(AccessToken).where(AccessToken.user_id == user.id)
    )
    return result.rowcount
