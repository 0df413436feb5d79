"""
Routes package for the Task Management API.

Blueprints:
- meta: service index and health check
- auth: registration, login, logout and current-user endpoints
- tasks: task CRUD and status updates
- users: admin-only user management
"""
