"""
Web client Flask application factory.

The web client is the user-facing side of the task manager: a
backend-for-frontend that renders Jinja pages and drives the task service
API on behalf of the browser.  It never touches a database; every task
read and write goes through :class:`~.api.TaskApiClient`.
"""

from __future__ import annotations

import logging

from flask import Flask

try:
    from services.web.config import get_config, load_web_public_key
except ModuleNotFoundError:  # pragma: no cover - fallback for service-local execution
    from config import get_config, load_web_public_key

from .formatting import format_due_date, to_datetime_local

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the web client application.

    Args:
        config_name: Optional configuration environment name
            (``"development"``, ``"testing"``, ``"production"``).  When
            ``None``, ``FLASK_ENV`` decides, defaulting to ``"development"``.

    Returns:
        A Flask application with the view blueprint and the due-date
        template filters registered.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config["JWT_PUBLIC_KEY"] = load_web_public_key(
        testing=bool(app.config.get("TESTING"))
    )

    logger.info("Creating web client app with config: %s", config_class.__name__)

    app.add_template_filter(format_due_date, "due_date")
    app.add_template_filter(to_datetime_local, "datetime_local")

    from .routes.views import views_bp

    app.register_blueprint(views_bp)
    return app
