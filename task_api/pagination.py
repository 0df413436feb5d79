"""Paginated listing payloads built on Flask-SQLAlchemy's ``db.paginate``."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flask import current_app, request, url_for
from sqlalchemy import Select

from . import db


def _positive_int(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


def paginate(
    stmt: Select,
    endpoint: str,
    serialize: Callable[[Any], dict[str, Any]],
) -> dict[str, Any]:
    """
    Run *stmt* for the page named by the ``page``/``per_page`` query args.

    ``per_page`` defaults to ``DEFAULT_PER_PAGE`` and is capped at
    ``MAX_PER_PAGE``.  ``page`` is clamped to ``MAX_PAGE``, and a page past
    the end yields an empty ``data`` list.

    Returns:
        ``{"data": [...], "links": {...}, "meta": {...}}``
    """
    default_per_page = current_app.config.get("DEFAULT_PER_PAGE", 15)
    max_per_page = current_app.config.get("MAX_PER_PAGE", 100)
    max_page = current_app.config.get("MAX_PAGE", 1_000_000)

    page = min(_positive_int(request.args.get("page"), 1), max_page)
    per_page = min(_positive_int(request.args.get("per_page"), default_per_page), max_per_page)

    pagination = db.paginate(stmt, page=page, per_page=per_page, error_out=False, count=True)
    last_page = max(pagination.pages, 1)

    def page_url(number: int | None) -> str | None:
        if number is None:
            return None
        return url_for(endpoint, page=number, per_page=per_page, _external=True)

    items = [serialize(item) for item in pagination.items]
    first_index = pagination.first if items else None
    last_index = pagination.last if items else None

    return {
        "data": items,
        "links": {
            "first": page_url(1),
            "last": page_url(last_page),
            "prev": page_url(pagination.prev_num),
            "next": page_url(pagination.next_num),
        },
        "meta": {
            "current_page": pagination.page,
            "from": first_index,
            "last_page": last_page,
            "path": url_for(endpoint, _external=True),
            "per_page": per_page,
            "to": last_index,
            "total": pagination.total,
        },
    }
