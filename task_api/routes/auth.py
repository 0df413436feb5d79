"""
Authentication endpoints.

Endpoints:
    POST /api/register  -- Create a member account and return a token.
    POST /api/login     -- Exchange email/password for a token.
    POST /api/logout    -- Revoke the presented token.
    GET  /api/me        -- Return the authenticated user.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request
from sqlalchemy import func, select

from .. import db
from ..auth import require_auth
from ..errors import AuthenticationFailure, CredentialMismatch
from ..models import User, UserRole
from ..responses import created_response, success_response
from ..tokens import AuthContext, issue_token, revoke_token
from ..validation import LoginInput, RegisterInput

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new user account.

    The account is always created with the ``member`` role; a ``role``
    field in the body is ignored.

    Returns:
        201 with ``user`` and ``token``; 422 on validation failure.
    """
    data = RegisterInput.from_payload(request.get_json(silent=True))

    user = User(name=data.name, email=data.email, role=UserRole.MEMBER.value)
    user.set_password(data.password)
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user_id=%s", user.id)

    token = issue_token(user)
    return created_response(
        {"user": user.to_dict(), "token": token},
        "User registered successfully",
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate a user and issue a new token.

    The same ``"Invalid credentials"`` message is used for an unknown email
    and a wrong password.
    """
    data = LoginInput.from_payload(request.get_json(silent=True))

    user = db.session.scalar(select(User).where(func.lower(User.email) == data.email))
    if user is None or not user.check_password(data.password):
        logger.info("Failed login attempt")
        raise CredentialMismatch()

    token = issue_token(user)
    return success_response({"user": user.to_dict(), "token": token}, "Login successful")


@auth_bp.route("/logout", methods=["POST"])
@require_auth
def logout(auth: AuthContext) -> tuple[Response, int]:
    """Revoke the token used for this request; other sessions stay live."""
    if not revoke_token(auth.token.jti):
        # Revoked by a concurrent request between validation and now
        raise AuthenticationFailure()
    logger.info("Logged out user_id=%s", auth.user.id)
    return success_response(None, "Logged out successfully")


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me(auth: AuthContext) -> tuple[Response, int]:
    return success_response(auth.user.to_dict(), "User retrieved successfully")
