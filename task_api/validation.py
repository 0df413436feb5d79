"""
Request validation into per-operation input structs.

Each write operation has its own allow-list dataclass.  ``from_payload``
builds the struct from a decoded JSON body or raises ``ValidationFailure``
carrying every failing field at once.  Fields not named by the struct
(``id``, ``user_id``, ``role``, timestamps, ...) are never read, so clients
cannot mass-assign them.

Inputs:
    RegisterInput          name, email, password (+ confirmation)
    LoginInput             email, password
    CreateTaskInput        title, description, status, due_date
    UpdateTaskInput        any subset of the CreateTaskInput fields
    UpdateTaskStatusInput  status
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from sqlalchemy import func, select

from . import db
from .errors import ValidationFailure
from .models import TaskStatus, User, utc_today

MAX_STRING_LENGTH = 255
MIN_PASSWORD_LENGTH = 8

# Deliberately loose: one "@", no whitespace, a dot in the domain part
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class _Unset:
    """Marker for fields absent from a partial update."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def _label(name: str) -> str:
    return name.replace("_", " ")


class _ErrorBag:
    """Collects field messages in the order the fields were checked."""

    def __init__(self) -> None:
        self.errors: dict[str, list[str]] = {}

    def add(self, name: str, message: str) -> None:
        self.errors.setdefault(name, []).append(message)

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationFailure(self.errors)


def _payload(data: Any) -> dict[str, Any]:
    """Treat a missing or non-object JSON body as an empty object."""
    return data if isinstance(data, dict) else {}


def _clean(value: Any) -> Any:
    """Trim strings and turn blank strings into ``None``."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _required_string(
    data: dict[str, Any], name: str, bag: _ErrorBag, max_length: int | None = MAX_STRING_LENGTH
) -> str | None:
    value = _clean(data.get(name))
    if value is None:
        bag.add(name, f"The {_label(name)} field is required.")
        return None
    if not isinstance(value, str):
        bag.add(name, f"The {_label(name)} field must be a string.")
        return None
    if max_length is not None and len(value) > max_length:
        bag.add(
            name,
            f"The {_label(name)} field must not be greater than {max_length} characters.",
        )
        return None
    return value


def _optional_string(data: dict[str, Any], name: str, bag: _ErrorBag) -> str | None:
    value = _clean(data.get(name))
    if value is None:
        return None
    if not isinstance(value, str):
        bag.add(name, f"The {_label(name)} field must be a string.")
        return None
    return value


def _status(data: dict[str, Any], name: str, bag: _ErrorBag) -> str | None:
    value = _clean(data.get(name))
    if value is None:
        bag.add(name, f"The {_label(name)} field is required.")
        return None
    if value not in TaskStatus.values():
        bag.add(name, f"The selected {_label(name)} is invalid.")
        return None
    return value


def parse_date(value: str) -> date:
    """
    Parse ``YYYY-MM-DD``; full ISO-8601 datetimes are reduced to their date.

    Raises:
        ValueError: If *value* is not a recognisable ISO date.
    """
    try:
        return date.fromisoformat(value)
    except ValueError:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()


def _due_date(data: dict[str, Any], name: str, bag: _ErrorBag) -> date | None:
    value = _clean(data.get(name))
    if value is None:
        return None
    if not isinstance(value, str):
        bag.add(name, f"The {_label(name)} field must be a valid date.")
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        bag.add(name, f"The {_label(name)} field must be a valid date.")
        return None
    if parsed < utc_today():
        bag.add(name, f"The {_label(name)} field must be a date after or equal to today.")
        return None
    return parsed


def _email_taken(email: str) -> bool:
    existing = db.session.scalar(
        select(User.id).where(func.lower(User.email) == email.lower())
    )
    return existing is not None


@dataclass(frozen=True)
class RegisterInput:
    name: str
    email: str
    password: str = field(repr=False)

    @classmethod
    def from_payload(cls, data: Any) -> RegisterInput:
        data = _payload(data)
        bag = _ErrorBag()

        name = _required_string(data, "name", bag)

        email = _required_string(data, "email", bag)
        if email is not None:
            email = email.lower()
            if not EMAIL_PATTERN.match(email):
                bag.add("email", "The email field must be a valid email address.")
            elif _email_taken(email):
                bag.add("email", "The email has already been taken.")

        # Passwords are not trimmed: surrounding spaces are part of the secret
        password = data.get("password")
        if password is None or password == "":
            bag.add("password", "The password field is required.")
        elif not isinstance(password, str):
            bag.add("password", "The password field must be a string.")
        else:
            if len(password) < MIN_PASSWORD_LENGTH:
                bag.add(
                    "password",
                    f"The password field must be at least {MIN_PASSWORD_LENGTH} characters.",
                )
            if data.get("password_confirmation") != password:
                bag.add("password", "The password field confirmation does not match.")

        bag.raise_if_any()
        return cls(name=name, email=email, password=password)


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str = field(repr=False)

    @classmethod
    def from_payload(cls, data: Any) -> LoginInput:
        data = _payload(data)
        bag = _ErrorBag()

        email = _required_string(data, "email", bag, max_length=None)
        if email is not None:
            email = email.lower()
            if not EMAIL_PATTERN.match(email):
                bag.add("email", "The email field must be a valid email address.")

        password = data.get("password")
        if password is None or password == "":
            bag.add("password", "The password field is required.")
        elif not isinstance(password, str):
            bag.add("password", "The password field must be a string.")

        bag.raise_if_any()
        return cls(email=email, password=password)


@dataclass(frozen=True)
class CreateTaskInput:
    title: str
    status: str
    description: str | None = None
    due_date: date | None = None

    @classmethod
    def from_payload(cls, data: Any) -> CreateTaskInput:
        data = _payload(data)
        bag = _ErrorBag()

        title = _required_string(data, "title", bag)
        description = _optional_string(data, "description", bag)
        status = _status(data, "status", bag)
        due_date = _due_date(data, "due_date", bag)

        bag.raise_if_any()
        return cls(title=title, status=status, description=description, due_date=due_date)


@dataclass(frozen=True)
class UpdateTaskInput:
    """Partial update: absent fields stay ``UNSET`` and are left untouched."""

    title: Any = UNSET
    description: Any = UNSET
    status: Any = UNSET
    due_date: Any = UNSET

    @classmethod
    def from_payload(cls, data: Any) -> UpdateTaskInput:
        data = _payload(data)
        bag = _ErrorBag()
        values: dict[str, Any] = {}

        if "title" in data:
            values["title"] = _required_string(data, "title", bag)
        if "description" in data:
            values["description"] = _optional_string(data, "description", bag)
        if "status" in data:
            values["status"] = _status(data, "status", bag)
        if "due_date" in data:
            values["due_date"] = _due_date(data, "due_date", bag)

        bag.raise_if_any()
        return cls(**values)

    def changes(self) -> dict[str, Any]:
        """Return only the fields the client supplied."""
        return {
            name: value
            for name, value in (
                ("title", self.title),
                ("description", self.description),
                ("status", self.status),
                ("due_date", self.due_date),
            )
            if value is not UNSET
        }


@dataclass(frozen=True)
class UpdateTaskStatusInput:
    status: str

    @classmethod
    def from_payload(cls, data: Any) -> UpdateTaskStatusInput:
        data = _payload(data)
        bag = _ErrorBag()
        status = _status(data, "status", bag)
        bag.raise_if_any()
        return cls(status=status)
