"""
Auth service Flask application factory.

Builds the identity collaborator the task client logs in against: user
registration, credential login that returns an RS256 bearer token, and a
token verification endpoint.  The task service never calls this service at
request time; it verifies tokens with the public key alone.
"""

from __future__ import annotations

import logging
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

try:
    from services.auth.config import get_config, load_auth_keys
except ModuleNotFoundError:  # pragma: no cover - fallback for service-local execution
    from config import get_config, load_auth_keys


db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the auth service application.

    Args:
        config_name: ``"development"``, ``"testing"`` or ``"production"``.
            When ``None``, ``FLASK_ENV`` decides, defaulting to
            ``"development"``.

    Returns:
        A Flask application with the user table created and the auth
        blueprint mounted at ``/api/auth``.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    private_key, public_key = load_auth_keys(testing=bool(app.config.get("TESTING")))
    app.config["JWT_PRIVATE_KEY"] = private_key
    app.config["JWT_PUBLIC_KEY"] = public_key

    logger.info("Creating auth service app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)

    from .routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api/auth")

    with app.app_context():
        db.create_all()
        logger.info("Auth service database tables created")

    return app
