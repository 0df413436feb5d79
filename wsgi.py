"""WSGI entry point for the Task Management API."""

import os

from task_api import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
