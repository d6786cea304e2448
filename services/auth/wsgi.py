"""WSGI entry point for the auth service."""

import os

try:
    from services.auth.auth_service import create_app
except ModuleNotFoundError:  # pragma: no cover - container/service-local fallback
    from auth_service import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
