"""WSGI entry point for the web client."""

import os

try:
    from services.web.web_client import create_app
except ModuleNotFoundError:  # pragma: no cover - container/service-local fallback
    from web_client import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
