"""
Errors raised by the task API client.

Each class corresponds to one way a task service call can end; views catch
them to decide between redirecting to login, flashing a message or
rendering an error page.
"""

from __future__ import annotations


class TaskClientError(Exception):
    """Base class for every task API client failure."""

    default_message = "Task service request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthorized(TaskClientError):
    """The task service rejected the session token (HTTP 401)."""

    default_message = "Session expired. Please log in again."


class Forbidden(TaskClientError):
    """The task belongs to another user (HTTP 403)."""

    default_message = "You do not have access to this task"


class NotFound(TaskClientError):
    """The task does not exist (HTTP 404)."""

    default_message = "Task not found"


class InvalidTask(TaskClientError):
    """The task service refused the submitted data (HTTP 400)."""

    default_message = "Invalid task data"


class ServiceUnavailable(TaskClientError):
    """The task service could not be reached or timed out."""

    default_message = "Task service unavailable. Please try again later."


class UnexpectedResponse(TaskClientError):
    """Any status code or payload the client does not know how to handle."""

    default_message = "Unexpected response from the task service"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
