"""WSGI entry point for the task service."""

import os

try:
    from services.tasks.task_service import create_app
except ModuleNotFoundError:  # pragma: no cover - container/service-local fallback
    from task_service import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
