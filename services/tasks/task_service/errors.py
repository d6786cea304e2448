"""
Error taxonomy for the task service.

Each error maps one-to-one onto an HTTP status code and a short machine
readable ``code``.  Route handlers raise these; the blueprint error handler
turns them into ``{"error": ..., "code": ...}`` JSON bodies.
"""

from __future__ import annotations

from typing import Any


class TaskServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class Unauthorized(TaskServiceError):
    """Missing, malformed, expired or otherwise invalid bearer token."""

    status_code = 401
    code = "unauthorized"
    default_message = "Missing or invalid Authorization header"


class Forbidden(TaskServiceError):
    """Valid identity, but the task belongs to another owner."""

    status_code = 403
    code = "forbidden"
    default_message = "You do not have access to this task"


class NotFound(TaskServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Task not found"


class ValidationError(TaskServiceError):
    """Request body failed validation (empty description, malformed date...)."""

    status_code = 400
    code = "validation_error"
    default_message = "Invalid task data"
