"""
Cross-Service Test Fixtures for Microservices Integration Testing.

This module spins up the auth service, the task service and the web
client in the same process so cross-service interactions can be tested
without Docker or HTTP networking.  Each backend gets its own test client
and its own in-memory database, just like production where each
microservice owns its datastore.  The web client's outgoing ``requests``
calls are routed into the backends' test clients.

Key SDET Concepts Demonstrated:
- Session-scoped app fixtures to avoid repeated startup costs
- Function-scoped test clients for per-test database isolation
- Shared RSA key fixtures so auth and task services agree on JWT contract
- In-process HTTP routing instead of mocks for full-stack flows
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import urlsplit

import pytest

from shared.test_helpers import TEST_PRIVATE_KEY, TEST_PUBLIC_KEY

os.environ["FLASK_ENV"] = "testing"
# Auth signs with the private key; tasks and web verify with the public key.
os.environ["TEST_JWT_PRIVATE_KEY"] = TEST_PRIVATE_KEY
os.environ["TEST_JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from services.auth.auth_service import create_app as create_auth_app
from services.auth.auth_service import db as auth_db
from services.tasks.task_service import create_app as create_task_app
from services.tasks.task_service import db as task_db
from services.web.web_client import create_app as create_web_app


class RoutedResponse:
    """Adapts a Flask test response to the slice of ``requests.Response`` in use."""

    def __init__(self, test_response):
        self.status_code = test_response.status_code
        self._payload = test_response.get_json(silent=True)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


def _path_of(url: str) -> str:
    return urlsplit(url).path


@pytest.fixture(scope="session")
def auth_service_app():
    """Provide a session-scoped auth Flask app for cross-service tests."""
    return create_auth_app("testing")


@pytest.fixture(scope="session")
def task_service_app():
    """Provide a session-scoped task Flask app for cross-service tests."""
    return create_task_app("testing")


@pytest.fixture(scope="session")
def web_client_app():
    """Provide a session-scoped web client Flask app for cross-service tests."""
    return create_web_app("testing")


@pytest.fixture(scope="function")
def auth_client(auth_service_app):
    """Provide a per-test auth service client with fresh database tables."""
    with auth_service_app.app_context():
        auth_db.create_all()
    yield auth_service_app.test_client()
    with auth_service_app.app_context():
        auth_db.session.rollback()
        auth_db.drop_all()


@pytest.fixture(scope="function")
def task_client(task_service_app):
    """Provide a per-test task service client with fresh database tables."""
    with task_service_app.app_context():
        task_db.create_all()
    yield task_service_app.test_client()
    with task_service_app.app_context():
        task_db.session.rollback()
        task_db.drop_all()


@pytest.fixture(scope="function")
def browser(web_client_app, auth_client, task_client, monkeypatch):
    """
    Provide a web client test client wired to the real backends.

    Login and registration posts go to the auth app; task API calls go to
    the task app.  Every routed call is recorded on ``browser.routed``.
    """
    routed: list[dict[str, Any]] = []

    def auth_post(url, json=None, timeout=None):
        routed.append({"service": "auth", "method": "POST", "path": _path_of(url)})
        return RoutedResponse(auth_client.post(_path_of(url), json=json))

    def task_request(method, url, headers=None, json=None, timeout=None):
        routed.append({"service": "tasks", "method": method, "path": _path_of(url)})
        return RoutedResponse(
            task_client.open(_path_of(url), method=method, headers=headers, json=json)
        )

    monkeypatch.setattr("services.web.web_client.routes.views.requests.post", auth_post)
    monkeypatch.setattr("services.web.web_client.api.requests.request", task_request)

    with web_client_app.test_client() as client:
        client.routed = routed
        yield client


@pytest.fixture
def jwt_public_key(auth_service_app) -> str:
    """Provide the JWT public key shared with the task service in tests."""
    return auth_service_app.config["JWT_PUBLIC_KEY"]
