"""
Role-based policy evaluation.

``authorize`` decides whether an actor may perform an action on a
resource.  It is a pure function of the actor's role and id and the
resource's owner, so it is safe to call from any request without locking.

Rules:
    LIST_TASKS, VIEW_TASK, CREATE_TASK   any authenticated actor
    UPDATE_TASK, DELETE_TASK             admin, or the task's owner
    LIST_USERS, VIEW_USER, DELETE_USER   admin only

Anything else, and any call without an actor, is denied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from .errors import AuthorizationFailure
from .models import User

logger = logging.getLogger(__name__)

ADMIN_REQUIRED_MESSAGE = "Unauthorized. Admin access required."


class Action(str, Enum):
    LIST_TASKS = "list_tasks"
    VIEW_TASK = "view_task"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    DELETE_TASK = "delete_task"
    LIST_USERS = "list_users"
    VIEW_USER = "view_user"
    DELETE_USER = "delete_user"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


def _any_actor(actor: User, resource: Any) -> bool:
    return True


def _admin_or_owner(actor: User, resource: Any) -> bool:
    if actor.is_admin:
        return True
    owner_id = getattr(resource, "user_id", None)
    return owner_id is not None and actor.id == owner_id


def _admin_only(actor: User, resource: Any) -> bool:
    return actor.is_admin


_RULES: dict[Action, Callable[[User, Any], bool]] = {
    Action.LIST_TASKS: _any_actor,
    Action.VIEW_TASK: _any_actor,
    Action.CREATE_TASK: _any_actor,
    Action.UPDATE_TASK: _admin_or_owner,
    Action.DELETE_TASK: _admin_or_owner,
    Action.LIST_USERS: _admin_only,
    Action.VIEW_USER: _admin_only,
    Action.DELETE_USER: _admin_only,
}


def authorize(actor: User | None, action: Action, resource: Any = None) -> Decision:
    """
    Decide whether *actor* may perform *action* on *resource*.

    Args:
        actor: The authenticated user, or ``None`` for anonymous callers.
        action: The action being attempted.
        resource: The target object, if any.  Ownership is read from its
            ``user_id`` attribute.

    Returns:
        ``Decision.ALLOW`` or ``Decision.DENY``.
    """
    if actor is None:
        return Decision.DENY
    rule = _RULES.get(action)
    if rule is None:
        return Decision.DENY
    return Decision.ALLOW if rule(actor, resource) else Decision.DENY


def enforce(
    actor: User | None,
    action: Action,
    resource: Any = None,
    message: str | None = None,
) -> None:
    """
    Raise ``AuthorizationFailure`` unless *actor* may perform *action*.

    The failure message never says why access was denied.
    """
    if authorize(actor, action, resource) is Decision.DENY:
        logger.info(
            "Denied %s for user_id=%s",
            action.value,
            getattr(actor, "id", None),
        )
        raise AuthorizationFailure(message)
