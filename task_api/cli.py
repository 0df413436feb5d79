"""
Flask CLI commands.

    flask --app wsgi create-admin NAME EMAIL PASSWORD
    flask --app wsgi seed

Registration through the API always creates members, so the first admin
has to come from here.
"""

from __future__ import annotations

import logging

import click
from faker import Faker
from flask import Flask
from sqlalchemy import func, select

from . import db
from .models import Task, TaskStatus, User, UserRole

logger = logging.getLogger(__name__)


def create_admin(name: str, email: str, password: str) -> User:
    """Persist and return a new admin user."""
    user = User(name=name.strip(), email=email.strip().lower(), role=UserRole.ADMIN.value)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info("Created admin user_id=%s", user.id)
    return user


def seed_tasks(fake: Faker | None = None) -> int:
    """
    Give every user one pending, one in-progress and one completed task.

    Returns:
        Number of tasks created.
    """
    fake = fake or Faker()
    created = 0
    for user in db.session.scalars(select(User)).all():
        for status in TaskStatus:
            db.session.add(
                Task(
                    user_id=user.id,
                    title=fake.sentence(nb_words=4),
                    description=fake.paragraph(),
                    status=status.value,
                )
            )
            created += 1
    db.session.commit()
    return created


def register_commands(app: Flask) -> None:
    """Attach the CLI commands to *app*."""

    @app.cli.command("create-admin")
    @click.argument("name")
    @click.argument("email")
    @click.argument("password")
    def create_admin_command(name: str, email: str, password: str) -> None:
        """Create an administrator account."""
        existing = db.session.scalar(
            select(User.id).where(func.lower(User.email) == email.strip().lower())
        )
        if existing is not None:
            raise click.ClickException(f"A user with email {email} already exists.")
        user = create_admin(name, email, password)
        click.echo(f"Created admin {user.email} (id={user.id})")

    @app.cli.command("seed")
    def seed_command() -> None:
        """Create sample tasks for every existing user."""
        click.echo(f"Created {seed_tasks()} tasks")
