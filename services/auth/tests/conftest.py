"""
Shared pytest fixtures for auth service tests.

Provides the Flask app, HTTP client, per-test database and a user factory
for the unit, integration and contract suites of this service.

Key SDET Concepts Demonstrated:
- Fixture scoping (session vs. function) for performance and isolation
- Factory-pattern fixtures for flexible test-data creation
- Environment variable overrides for deterministic test configuration
"""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest

from shared.test_helpers import TEST_PRIVATE_KEY, TEST_PUBLIC_KEY

os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_PRIVATE_KEY"] = TEST_PRIVATE_KEY
os.environ["TEST_JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from services.auth.auth_service import create_app, db
from services.auth.auth_service.models import User


@pytest.fixture(scope="session")
def app():
    """Create the auth app once with the 'testing' config."""
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test function.

    Creates all tables before the test and drops them afterwards.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def user_factory(db_session) -> Callable[..., User]:
    """Return a callable that creates and persists users with known passwords."""

    def _create_user(
        name: str = "Test User",
        email: str = "testuser@example.com",
        password: str = "StrongPass123!",
    ) -> User:
        user = User(name=name, email=email)
        user.set_password(password)
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user
