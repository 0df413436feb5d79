"""
Database models for the Task Management API.

Defines the SQLAlchemy ORM models backing the API along with the
enumerations for user roles and task statuses.

Models:
    User        -- registered account with a role (admin or member).
    Task        -- a to-do item owned by exactly one user.
    AccessToken -- server-side binding for an issued bearer token.

A user owns its tasks and access tokens: deleting the user removes both,
through the ORM cascade and the ``ON DELETE CASCADE`` foreign keys.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return today's calendar date in UTC."""
    return utcnow().date()


def _to_utc_iso(value: datetime | None) -> str | None:
    """
    Convert a datetime to an ISO-8601 UTC string.

    SQLite returns naive datetimes even for timezone-aware columns, so naive
    values are assumed to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


class UserRole(str, Enum):
    """Roles a user can hold."""

    ADMIN = "admin"
    MEMBER = "member"


class TaskStatus(str, Enum):
    """
    Enumeration of possible task lifecycle statuses.

    Inherits from ``str`` so members compare equal to the raw strings stored
    in the database column and serialise directly to JSON.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


class User(db.Model):
    """
    Registered account.

    Attributes:
        id: Auto-incrementing primary key.
        name: Display name.
        email: Unique, lower-cased email address used to log in.
        password_hash: Werkzeug salted hash; never serialised.
        role: ``admin`` or ``member``.  Registration always yields
            ``member``; admins are created from the CLI.
        created_at: Timestamp of account creation (UTC).
        updated_at: Timestamp of last modification (UTC).
    """

    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(255), nullable=False)
    # Indexed because every login looks the user up by email
    email: str = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    role: str = db.Column(db.String(20), nullable=False, default=UserRole.MEMBER.value)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    tasks = db.relationship(
        "Task",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
    )
    access_tokens = db.relationship(
        "AccessToken",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def set_password(self, password: str) -> None:
        """Hash and store a plain-text password (PBKDF2 with a random salt)."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Return ``True`` if *password* matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, Any]:
        """
        Return a response-safe dictionary.

        ``password_hash`` is deliberately excluded.
        """
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": _to_utc_iso(self.created_at),
            "updated_at": _to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: Owning user.  Set from the authenticated actor on
            creation and never changed afterwards.
        title: Short summary of the task.
        description: Optional longer text.
        status: Lifecycle status (see ``TaskStatus``).
        due_date: Optional calendar deadline.
        created_at: Timestamp of task creation (UTC).
        updated_at: Timestamp of last modification (UTC).
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: str = db.Column(db.String(255), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    status: str = db.Column(
        db.String(20), nullable=False, default=TaskStatus.PENDING.value
    )
    due_date: date | None = db.Column(db.Date, nullable=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = db.relationship("User", back_populates="tasks")

    def is_pending(self) -> bool:
        return self.status == TaskStatus.PENDING.value

    def is_in_progress(self) -> bool:
        return self.status == TaskStatus.IN_PROGRESS.value

    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED.value

    def is_overdue(self, today: date | None = None) -> bool:
        """
        Return ``True`` when the due date has passed and the task is open.

        A task without a due date is never overdue.  The due date counts
        from its midnight, so an open task due today is already overdue.
        """
        if self.due_date is None:
            return False
        today = today or utc_today()
        return self.due_date <= today and not self.is_completed()

    def to_dict(self) -> dict[str, Any]:
        """Serialise the task, including its owner, to a JSON-safe dict."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "is_overdue": self.is_overdue(),
            "user": self.user.to_dict() if self.user is not None else None,
            "created_at": _to_utc_iso(self.created_at),
            "updated_at": _to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"


class AccessToken(db.Model):
    """
    Server-side record of an issued bearer token.

    The token handed to the client carries ``jti``; a token is valid only
    while this row exists.  Logging out deletes the row.
    """

    __tablename__ = "access_tokens"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    jti: str = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name: str = db.Column(db.String(255), nullable=False, default="auth_token")
    created_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow
    )

    user = db.relationship("User", back_populates="access_tokens")

    def __repr__(self) -> str:
        return f"<AccessToken {self.id} user={self.user_id}>"
