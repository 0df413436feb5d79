"""Tests for the ``create-admin`` and ``seed`` Flask CLI commands."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from task_api.cli import seed_tasks
from task_api.models import Task, TaskStatus, User, UserRole

pytestmark = pytest.mark.unit


def test_create_admin_command(app, db_session):
    # Arrange
    runner = app.test_cli_runner()

    # Act
    result = runner.invoke(args=["create-admin", "Root", "Root@Example.com", "password123"])

    # Assert
    assert result.exit_code == 0, result.output
    user = db_session.session.scalar(select(User).where(User.email == "root@example.com"))
    assert user.role == UserRole.ADMIN.value
    assert user.check_password("password123")


def test_create_admin_rejects_duplicate_email(app, member):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-admin", "Again", member.email, "password123"])

    assert result.exit_code != 0
    assert "already exists" in result.output


def test_seed_gives_each_user_one_task_per_status(db_session, member, other_member):
    # Act
    created = seed_tasks()

    # Assert
    assert created == 6
    for user in (member, other_member):
        statuses = sorted(
            db_session.session.scalars(select(Task.status).where(Task.user_id == user.id)).all()
        )
        assert statuses == sorted(status.value for status in TaskStatus)
