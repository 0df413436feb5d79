"""
Integration tests for the authentication endpoints.

Covers registration, login, logout and ``/me`` through the Flask test
client, including token revocation and the rule that clients can never
choose their own role.

Key SDET Concepts Demonstrated:
- Contract assertions on the response envelope
- Negative testing (bad credentials, duplicate email, revoked token)
- Idempotency of logout
"""

from __future__ import annotations

import pytest

from task_api.models import User, UserRole
from tests.helpers import DEFAULT_PASSWORD, auth_headers

pytestmark = pytest.mark.integration


def _register(client, **overrides):
    payload = {
        "name": "John",
        "email": "john@example.com",
        "password": "password123",
        "password_confirmation": "password123",
    }
    payload.update(overrides)
    return client.post("/api/register", json=payload)


class TestRegister:
    """Tests for POST /api/register."""

    def test_register_creates_member_and_returns_token(self, client, db_session):
        """Test the documented registration scenario."""
        # Act
        response = _register(client)

        # Assert
        assert response.status_code == 201
        body = response.get_json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["data"]["user"]["role"] == "member"
        assert body["data"]["user"]["email"] == "john@example.com"
        assert "password_hash" not in body["data"]["user"]
        assert body["data"]["token"]

    def test_register_ignores_submitted_role(self, client, db_session):
        """Test that a client-supplied role never reaches the store."""
        # Act
        response = _register(client, role="admin")

        # Assert
        assert response.status_code == 201
        user = db_session.session.get(User, response.get_json()["data"]["user"]["id"])
        assert user.role == UserRole.MEMBER.value

    def test_registration_token_is_usable(self, client, db_session):
        # Arrange
        token = _register(client).get_json()["data"]["token"]

        # Act
        response = client.get("/api/me", headers=auth_headers(token))

        # Assert
        assert response.status_code == 200
        assert response.get_json()["data"]["email"] == "john@example.com"

    def test_register_with_invalid_data_reports_all_fields(self, client, db_session):
        # Act
        response = client.post(
            "/api/register",
            json={"name": "", "email": "invalid-email", "password": "short"},
        )

        # Assert
        assert response.status_code == 422
        body = response.get_json()
        assert body["success"] is False
        assert set(body["errors"]) == {"name", "email", "password"}
        assert body["message"] == body["errors"]["name"][0]

    def test_register_with_existing_email(self, client, db_session, user_factory):
        # Arrange
        user_factory(email="existing@example.com")

        # Act
        response = _register(client, email="existing@example.com")

        # Assert
        assert response.status_code == 422
        assert response.get_json()["errors"]["email"] == ["The email has already been taken."]

    def test_register_without_body(self, client, db_session):
        response = client.post("/api/register")

        assert response.status_code == 422
        assert set(response.get_json()["errors"]) == {"name", "email", "password"}


class TestLogin:
    """Tests for POST /api/login."""

    def test_login_success(self, client, member):
        # Act
        response = client.post(
            "/api/login", json={"email": member.email, "password": DEFAULT_PASSWORD}
        )

        # Assert
        assert response.status_code == 200
        body = response.get_json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == member.id
        assert body["data"]["token"]

    def test_login_email_is_case_insensitive(self, client, member):
        response = client.post(
            "/api/login", json={"email": member.email.upper(), "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200

    def test_login_wrong_password(self, client, member):
        response = client.post(
            "/api/login", json={"email": member.email, "password": "wrongpassword"}
        )

        assert response.status_code == 401
        assert response.get_json() == {
            "success": False,
            "message": "Invalid credentials",
            "data": None,
        }

    def test_login_unknown_email(self, client, db_session):
        response = client.post(
            "/api/login",
            json={"email": "nonexistent@example.com", "password": "password123"},
        )

        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid credentials"

    def test_login_missing_fields(self, client, db_session):
        response = client.post("/api/login", json={})

        assert response.status_code == 422
        assert set(response.get_json()["errors"]) == {"email", "password"}

    def test_each_login_opens_a_separate_session(self, client, member):
        """Test that logging out of one session keeps the other alive."""
        # Arrange
        credentials = {"email": member.email, "password": DEFAULT_PASSWORD}
        first = client.post("/api/login", json=credentials).get_json()["data"]["token"]
        second = client.post("/api/login", json=credentials).get_json()["data"]["token"]

        # Act
        client.post("/api/logout", headers=auth_headers(first))

        # Assert
        assert client.get("/api/me", headers=auth_headers(first)).status_code == 401
        assert client.get("/api/me", headers=auth_headers(second)).status_code == 200


class TestLogout:
    """Tests for POST /api/logout."""

    def test_logout_revokes_token(self, client, member_headers):
        # Act
        response = client.post("/api/logout", headers=member_headers)

        # Assert
        assert response.status_code == 200
        assert response.get_json() == {
            "success": True,
            "message": "Logged out successfully",
            "data": None,
        }
        assert client.get("/api/tasks", headers=member_headers).status_code == 401

    def test_logout_twice_yields_401(self, client, member_headers):
        """Test that the second logout with the same token is a clean 401."""
        # Arrange
        client.post("/api/logout", headers=member_headers)

        # Act
        response = client.post("/api/logout", headers=member_headers)

        # Assert
        assert response.status_code == 401
        assert response.get_json()["message"] == "Unauthenticated"

    def test_logout_unauthenticated(self, client, db_session):
        response = client.post("/api/logout")

        assert response.status_code == 401


class TestMe:
    """Tests for GET /api/me."""

    def test_me_returns_current_user(self, client, member, member_headers):
        response = client.get("/api/me", headers=member_headers)

        assert response.status_code == 200
        body = response.get_json()
        assert body["message"] == "User retrieved successfully"
        assert body["data"]["id"] == member.id
        assert body["data"]["email"] == member.email

    @pytest.mark.parametrize(
        "header",
        ["", "Bearer", "Bearer ", "Basic dXNlcjpwYXNz", "Bearer not-a-token", "Token abc"],
    )
    def test_me_rejects_bad_authorization_headers(self, client, db_session, header):
        response = client.get("/api/me", headers={"Authorization": header})

        assert response.status_code == 401
        assert response.get_json() == {"success": False, "message": "Unauthenticated", "data": None}
