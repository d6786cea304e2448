"""
Shared pytest fixtures for task-service tests.

Provides the Flask application, test client, database session, bearer
tokens and a task factory used by the unit, integration and contract
suites.

Key SDET Concepts Demonstrated:
- Session-scoped vs function-scoped fixtures for performance and isolation
- Factory pattern (task_factory) for flexible test-data creation
- Shared RS256 test keys so tokens verify exactly like production ones
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from faker import Faker

from shared.test_helpers import TEST_PUBLIC_KEY, auth_headers, create_test_token

os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from services.tasks.task_service import create_app, db
from services.tasks.task_service.models import Task

fake = Faker()


@pytest.fixture(scope="session")
def app():
    """Provide one task-service application for the whole test session."""
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a fresh Flask test client for every test."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean task store for each test function.

    Creates all tables before the test and drops them afterwards so the
    next test starts from an empty store.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def owner_token() -> str:
    """Valid bearer token for owner 1."""
    return create_test_token(user_id=1, email="owner_one@example.com")


@pytest.fixture
def other_owner_token() -> str:
    """Valid bearer token for owner 2, used in ownership tests."""
    return create_test_token(user_id=2, email="owner_two@example.com")


@pytest.fixture
def api_headers(owner_token) -> dict[str, str]:
    return auth_headers(owner_token)


@pytest.fixture
def other_owner_headers(other_owner_token) -> dict[str, str]:
    return auth_headers(other_owner_token)


@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture that inserts Task rows straight into the store.

    Returns a callable ``_create_task(**kwargs)`` with Faker-generated
    defaults; the rows disappear with the per-test tables.
    """

    def _create_task(
        *,
        owner_id: int = 1,
        description: str | None = None,
        due_date: datetime | None = None,
    ) -> Task:
        task = Task(
            owner_id=owner_id,
            description=description or fake.sentence(nb_words=5),
            due_date=due_date,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """A single task owned by owner 1 with known values."""
    return task_factory(owner_id=1, description="Sample task for testing")


@pytest.fixture
def multiple_tasks(task_factory) -> list[Task]:
    """Three tasks for owner 1, one of them with a due date."""
    return [
        task_factory(owner_id=1, description="Water the plants"),
        task_factory(
            owner_id=1,
            description="Renew passport",
            due_date=datetime.now(timezone.utc) + timedelta(days=7),
        ),
        task_factory(owner_id=1, description="Call the dentist"),
    ]


@pytest.fixture
def valid_task_data() -> dict[str, Any]:
    """A complete create-task payload."""
    return {
        "description": "Prepare the quarterly report",
        "dueDate": "2025-03-01T10:00:00Z",
    }


@pytest.fixture
def minimal_task_data() -> dict[str, str]:
    """The smallest valid create-task payload (description only)."""
    return {"description": "Buy milk"}
