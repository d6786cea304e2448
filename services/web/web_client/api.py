"""
HTTP client for the task service API.

:class:`TaskApiClient` turns each task service operation into one
``requests`` call authenticated with the session's bearer token, and each
response into either :class:`~.models.TaskView` records or a
:mod:`~.errors` exception.  A 401 invalidates the session before the error
is raised.  Calls are never retried.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any

import requests

from .errors import (
    Forbidden,
    InvalidTask,
    NotFound,
    ServiceUnavailable,
    Unauthorized,
    UnexpectedResponse,
)
from .formatting import to_utc_iso
from .models import TaskView
from .session import SessionContext

logger = logging.getLogger(__name__)


class _Unset(Enum):
    UNSET = "unset"


UNSET = _Unset.UNSET

_ERRORS_BY_STATUS = {
    400: InvalidTask,
    403: Forbidden,
    404: NotFound,
}


def _response_error_message(response: requests.Response) -> str | None:
    """Return the ``error`` field of a JSON error body, if there is one."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    message = payload.get("error")
    if isinstance(message, str) and message.strip():
        return message
    return None


class TaskApiClient:
    """
    Task service operations for one session.

    Args:
        base_url: Root URL of the task service, e.g. ``http://localhost:5001``.
        session: The session whose token authenticates every call.
        timeout: Seconds to wait for each response.
    """

    def __init__(self, base_url: str, session: SessionContext, timeout: float = 5) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._timeout = timeout

    # =================================================================
    # Operations
    # =================================================================

    def list_tasks(self) -> list[TaskView]:
        payload = self._call("GET", "/api/tasks", expected=200)
        if not isinstance(payload, dict) or not isinstance(payload.get("tasks"), list):
            raise UnexpectedResponse("Malformed task list from the task service", 200)
        return [self._task(item) for item in payload["tasks"]]

    def get_task(self, task_id: int) -> TaskView:
        return self._task(self._call("GET", f"/api/tasks/{task_id}", expected=200))

    def create_task(self, description: str, due_date: datetime | None = None) -> TaskView:
        body = {
            "description": description,
            "dueDate": to_utc_iso(due_date) if due_date is not None else None,
        }
        return self._task(self._call("POST", "/api/tasks", expected=201, json=body))

    def update_task(
        self,
        task_id: int,
        *,
        description: str | _Unset = UNSET,
        due_date: datetime | None | _Unset = UNSET,
    ) -> TaskView:
        """
        Send only the given fields; ``due_date=None`` clears the due date.
        """
        body: dict[str, Any] = {}
        if description is not UNSET:
            body["description"] = description
        if due_date is not UNSET:
            body["dueDate"] = to_utc_iso(due_date) if due_date is not None else None
        return self._task(
            self._call("PUT", f"/api/tasks/{task_id}", expected=200, json=body)
        )

    def delete_task(self, task_id: int) -> None:
        self._call("DELETE", f"/api/tasks/{task_id}", expected=200)

    # =================================================================
    # Transport
    # =================================================================

    def _call(
        self,
        method: str,
        path: str,
        *,
        expected: int,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._session.authorization_header(),
                json=json,
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            logger.warning("Task service timed out: %s %s", method, url)
            raise ServiceUnavailable("Task service timed out. Please try again.") from exc
        except requests.RequestException as exc:
            logger.warning("Task service unreachable: %s %s (%s)", method, url, exc)
            raise ServiceUnavailable() from exc

        if response.status_code == expected:
            try:
                return response.json()
            except ValueError as exc:
                raise UnexpectedResponse(
                    "Task service returned a non-JSON body", response.status_code
                ) from exc

        self._raise_for(method, url, response)

    def _raise_for(self, method: str, url: str, response: requests.Response) -> None:
        message = _response_error_message(response)
        if response.status_code == 401:
            self._session.invalidate()
            raise Unauthorized()

        error_class = _ERRORS_BY_STATUS.get(response.status_code)
        if error_class is not None:
            raise error_class(message)

        logger.error(
            "Unexpected task service response: %s %s -> %s",
            method,
            url,
            response.status_code,
        )
        raise UnexpectedResponse(message, response.status_code)

    @staticmethod
    def _task(payload: Any) -> TaskView:
        try:
            return TaskView.from_json(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise UnexpectedResponse("Malformed task from the task service") from exc
