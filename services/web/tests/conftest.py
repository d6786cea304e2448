"""
Shared pytest fixtures for web client tests.

The web client holds no database, so the fixtures are the Flask app, a
test client, a logged-in session and a scriptable stand-in for the task
service that replaces ``requests.request`` inside the API client.

Key SDET Concepts Demonstrated:
- Fixture scoping (session vs. function) for performance and isolation
- Fake HTTP collaborators that record every outgoing call
- Shared RS256 test keys for cross-service token verification
"""

from __future__ import annotations

import os
from collections import defaultdict
from typing import Any
from urllib.parse import urlsplit

import pytest

from shared.test_helpers import TEST_PUBLIC_KEY, create_test_token

os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from services.web.web_client import create_app


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeTaskService:
    """
    Scriptable replacement for ``requests.request`` in the task API client.

    Responses are registered per ``(method, path)``.  Several responses for
    the same route are served in order, and the last one repeats.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self._outcomes: dict[tuple[str, str], list[Any]] = defaultdict(list)

    def respond(self, method: str, path: str, status_code: int, payload: Any = None) -> None:
        self._outcomes[(method, path)].append(FakeResponse(status_code, payload))

    def fail(self, method: str, path: str, error: Exception) -> None:
        self._outcomes[(method, path)].append(error)

    def calls_to(self, method: str, path: str) -> list[dict[str, Any]]:
        return [
            call
            for call in self.calls
            if call["method"] == method and urlsplit(call["url"]).path == path
        ]

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        key = (kwargs["method"], urlsplit(kwargs["url"]).path)
        queue = self._outcomes.get(key)
        if not queue:
            raise AssertionError(f"Unexpected task service call: {key}")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture(scope="session")
def app():
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def session_token() -> str:
    return create_test_token(user_id=1, email="demo@example.com")


@pytest.fixture
def logged_in_client(client, session_token):
    """A test client whose session already holds a valid token."""
    with client.session_transaction() as sess:
        sess["auth_token"] = session_token
    return client


@pytest.fixture
def task_service(monkeypatch) -> FakeTaskService:
    fake = FakeTaskService()
    monkeypatch.setattr("services.web.web_client.api.requests.request", fake)
    return fake


@pytest.fixture
def task_payload():
    """Factory for task JSON bodies in the task service's camelCase shape."""

    def _payload(
        task_id: int = 1,
        description: str = "Buy milk",
        due_date: str | None = None,
        owner_id: int = 1,
    ) -> dict[str, Any]:
        return {
            "id": task_id,
            "ownerId": owner_id,
            "description": description,
            "dueDate": due_date,
            "createdAt": "2025-01-01T08:00:00Z",
            "updatedAt": "2025-01-01T08:00:00Z",
        }

    return _payload
