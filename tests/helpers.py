"""Test helper functions shared across the test suites."""

from __future__ import annotations

from datetime import timedelta

from task_api.models import utc_today

DEFAULT_PASSWORD = "password123"


def auth_headers(token: str) -> dict[str, str]:
    """Build common JSON API headers with bearer token auth."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def days_from_today(days: int) -> str:
    """Return the UTC date *days* away from today as ``YYYY-MM-DD``."""
    return (utc_today() + timedelta(days=days)).isoformat()
