"""Service index and health-check endpoints (public)."""

from __future__ import annotations

import os

from flask import Blueprint, Response, current_app, jsonify

meta_bp = Blueprint("meta", __name__)


@meta_bp.route("/", methods=["GET"])
def index() -> tuple[Response, int]:
    """Describe the API."""
    return jsonify(
        {
            "success": True,
            "message": "Task Management API",
            "version": current_app.config.get("API_VERSION", "1.0.0"),
        }
    ), 200


@meta_bp.route("/api/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """
    Return service health status.

    Intended for load-balancer and orchestrator liveness probes.
    """
    return jsonify(
        {
            "status": "healthy",
            "service": "task-api",
            "environment": os.getenv("FLASK_ENV", "development"),
        }
    ), 200
