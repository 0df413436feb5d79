"""
Shared pytest fixtures for the Task Management API test suite.

Provides the Flask application, test client, a clean database per test,
factories for users, tasks and tokens, and ready-made member/admin
identities with their request headers.

Key Concepts Demonstrated:
- Session-scoped app vs function-scoped database for speed and isolation
- Factory fixtures (user_factory, task_factory) for flexible test data
- Token minting through the real token issuer, not hand-built JWTs
"""

from __future__ import annotations

import os
from datetime import date

import pytest
from faker import Faker

# Set testing environment before importing the app
os.environ["FLASK_ENV"] = "testing"

from task_api import create_app, db
from task_api.models import Task, TaskStatus, User, UserRole
from task_api.tokens import issue_token
from tests.helpers import DEFAULT_PASSWORD, auth_headers

fake = Faker()


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """Create the application once for the whole test session."""
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a Flask test client scoped to a single test function."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test.

    Creates all tables before the test and drops them afterwards so no
    rows leak between tests.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session):
    """
    Factory fixture that creates User rows.

    Every user gets ``DEFAULT_PASSWORD`` unless one is given.
    """

    def _create_user(
        *,
        name: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: str = UserRole.MEMBER.value,
    ) -> User:
        user = User(
            name=name or fake.name(),
            email=(email or fake.unique.email()).lower(),
            role=role,
        )
        user.set_password(password)
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def task_factory(db_session, user_factory):
    """
    Factory fixture that creates Task rows.

    When no owner is given a fresh member is created to own the task.
    """

    def _create_task(
        *,
        user: User | None = None,
        title: str | None = None,
        description: str | None = None,
        status: str = TaskStatus.PENDING.value,
        due_date: date | None = None,
    ) -> Task:
        owner = user or user_factory()
        task = Task(
            user_id=owner.id,
            title=title or fake.sentence(nb_words=4),
            description=description or fake.paragraph(),
            status=status,
            due_date=due_date,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def token_for(db_session):
    """Return a callable that issues a real bearer token for a user."""

    def _issue(user: User) -> str:
        return issue_token(user)

    return _issue


# -----------------------------------------------------------------------------
# Identity Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def member(user_factory) -> User:
    return user_factory(name="Member One", email="member.one@example.com")


@pytest.fixture
def other_member(user_factory) -> User:
    return user_factory(name="Member Two", email="member.two@example.com")


@pytest.fixture
def admin(user_factory) -> User:
    return user_factory(
        name="Admin User", email="admin@example.com", role=UserRole.ADMIN.value
    )


@pytest.fixture
def member_headers(member, token_for) -> dict[str, str]:
    return auth_headers(token_for(member))


@pytest.fixture
def other_member_headers(other_member, token_for) -> dict[str, str]:
    return auth_headers(token_for(other_member))


@pytest.fixture
def admin_headers(admin, token_for) -> dict[str, str]:
    return auth_headers(token_for(admin))


@pytest.fixture
def member_task(task_factory, member) -> Task:
    """A single pending task owned by ``member``."""
    return task_factory(
        user=member,
        title="Sample Task",
        description="This is a sample task for testing",
        status=TaskStatus.PENDING.value,
    )
