"""
Task endpoints.

Every endpoint requires a bearer token.  Any authenticated user can list,
view and create tasks; only the owner or an admin may change or delete one.

Endpoints:
    GET    /api/tasks              - Paginated list, newest first
    GET    /api/tasks/<id>         - Retrieve a single task
    POST   /api/tasks              - Create a task owned by the caller
    PUT    /api/tasks/<id>         - Partial update
    DELETE /api/tasks/<id>         - Delete a task
    PATCH  /api/tasks/<id>/status  - Update only the status

Checks run in a fixed order: authentication (401), lookup (404),
policy (403), then input validation (422).
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from .. import db
from ..auth import require_auth
from ..errors import ResourceNotFound
from ..models import Task
from ..pagination import paginate
from ..policy import Action, enforce
from ..responses import created_response, success_response
from ..tokens import AuthContext
from ..validation import CreateTaskInput, UpdateTaskInput, UpdateTaskStatusInput

logger = logging.getLogger(__name__)

tasks_bp = Blueprint("tasks", __name__)


def _get_task_or_404(task_id: int) -> Task:
    task = db.session.get(Task, task_id)
    if task is None:
        raise ResourceNotFound()
    return task


@tasks_bp.route("/tasks", methods=["GET"])
@require_auth
def list_tasks(auth: AuthContext) -> tuple[Response, int]:
    """
    List every task, newest first.

    Query params ``page`` and ``per_page`` (default 15) select the page.
    """
    enforce(auth.user, Action.LIST_TASKS)

    stmt = (
        select(Task)
        .options(selectinload(Task.user))
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    payload = paginate(stmt, "tasks.list_tasks", lambda task: task.to_dict())
    return success_response(payload, "Tasks retrieved successfully")


@tasks_bp.route("/tasks/<int:task_id>", methods=["GET"])
@require_auth
def get_task(auth: AuthContext, task_id: int) -> tuple[Response, int]:
    task = _get_task_or_404(task_id)
    enforce(auth.user, Action.VIEW_TASK, task)
    return success_response(task.to_dict(), "Task retrieved successfully")


@tasks_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task(auth: AuthContext) -> tuple[Response, int]:
    """Create a task; the owner is always the authenticated user."""
    enforce(auth.user, Action.CREATE_TASK)
    data = CreateTaskInput.from_payload(request.get_json(silent=True))

    task = Task(
        user_id=auth.user.id,
        title=data.title,
        description=data.description,
        status=data.status,
        due_date=data.due_date,
    )
    db.session.add(task)
    db.session.commit()
    return created_response(task.to_dict(), "Task created successfully")


@tasks_bp.route("/tasks/<int:task_id>", methods=["PUT"])
@require_auth
def update_task(auth: AuthContext, task_id: int) -> tuple[Response, int]:
    """Update the supplied fields of a task; ownership never changes."""
    task = _get_task_or_404(task_id)
    enforce(auth.user, Action.UPDATE_TASK, task)
    data = UpdateTaskInput.from_payload(request.get_json(silent=True))

    for name, value in data.changes().items():
        setattr(task, name, value)

    db.session.commit()
    return success_response(task.to_dict(), "Task updated successfully")


@tasks_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_task(auth: AuthContext, task_id: int) -> tuple[Response, int]:
    task = _get_task_or_404(task_id)
    enforce(auth.user, Action.DELETE_TASK, task)

    db.session.delete(task)
    db.session.commit()
    logger.info("Task %s deleted by user_id=%s", task_id, auth.user.id)
    return success_response(None, "Task deleted successfully")


@tasks_bp.route("/tasks/<int:task_id>/status", methods=["PATCH"])
@require_auth
def update_task_status(auth: AuthContext, task_id: int) -> tuple[Response, int]:
    task = _get_task_or_404(task_id)
    enforce(auth.user, Action.UPDATE_TASK, task)
    data = UpdateTaskStatusInput.from_payload(request.get_json(silent=True))

    task.status = data.status
    db.session.commit()
    return success_response(task.to_dict(), "Task status updated successfully")
