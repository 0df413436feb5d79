"""
Admin-only user management endpoints.

Endpoints:
    GET    /api/users       - Paginated list of users, newest first
    GET    /api/users/<id>  - Retrieve a single user
    DELETE /api/users/<id>  - Delete a user with all their tasks and tokens

The admin check runs before the lookup, so a member probing for user ids
gets 403 whether or not the id exists.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response
from sqlalchemy import delete, select

from .. import db
from ..auth import require_auth
from ..errors import ResourceNotFound
from ..models import Task, User
from ..pagination import paginate
from ..policy import ADMIN_REQUIRED_MESSAGE, Action, enforce
from ..responses import success_response
from ..tokens import AuthContext, revoke_all_tokens

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__)


def _get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise ResourceNotFound()
    return user


def delete_user_cascade(user: User) -> int:
    """
    Delete *user*, their tasks and their tokens in one transaction.

    With foreign keys enforced, a task inserted for this user by a
    concurrent request makes the commit fail instead of leaving an orphan.

    Returns:
        The number of tasks removed.
    """
    deleted_tasks = db.session.execute(delete(Task).where(Task.user_id == user.id)).rowcount
    revoke_all_tokens(user)
    db.session.delete(user)
    db.session.commit()
    return deleted_tasks


@users_bp.route("/users", methods=["GET"])
@require_auth
def list_users(auth: AuthContext) -> tuple[Response, int]:
    enforce(auth.user, Action.LIST_USERS, message=ADMIN_REQUIRED_MESSAGE)

    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    payload = paginate(stmt, "users.list_users", lambda user: user.to_dict())
    return success_response(payload, "Users retrieved successfully")


@users_bp.route("/users/<int:user_id>", methods=["GET"])
@require_auth
def get_user(auth: AuthContext, user_id: int) -> tuple[Response, int]:
    enforce(auth.user, Action.VIEW_USER, message=ADMIN_REQUIRED_MESSAGE)
    user = _get_user_or_404(user_id)
    return success_response(user.to_dict(), "User retrieved successfully")


@users_bp.route("/users/<int:user_id>", methods=["DELETE"])
@require_auth
def delete_user(auth: AuthContext, user_id: int) -> tuple[Response, int]:
    enforce(auth.user, Action.DELETE_USER, message=ADMIN_REQUIRED_MESSAGE)
    user = _get_user_or_404(user_id)
    admin_id = auth.user.id

    deleted_tasks = delete_user_cascade(user)
    logger.info(
        "User %s deleted by admin user_id=%s (%s tasks removed)",
        user_id,
        admin_id,
        deleted_tasks,
    )
    return success_response(None, "User deleted successfully")
