"""
HTML view routes for the web client.

1. **Helper functions**: per-request wiring of the session context, task
   API client and task board, plus the shared error policy.
2. **Authentication routes**: login, registration and logout against the
   auth service.
3. **Task routes**: the task list, create/edit forms, delete, and staging
   or saving a row's due date.

Error policy for task routes: ``Unauthorized`` means the session is already
invalidated, so the user is sent to the login page; any other client error
is flashed and the user stays where they were.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

import requests
from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from ..api import TaskApiClient
from ..auth import verify_token
from ..board import TaskBoard
from ..errors import (
    Forbidden,
    NotFound,
    ServiceUnavailable,
    TaskClientError,
    Unauthorized,
)
from ..formatting import parse_datetime_local
from ..models import InvalidTransition, PendingDueDates
from ..session import SessionContext

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)

SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."


# =====================================================================
# Helper Functions
# =====================================================================


def _auth_service_url(path: str) -> str:
    return f"{current_app.config['AUTH_SERVICE_URL'].rstrip('/')}/{path.lstrip('/')}"


def _session_context() -> SessionContext:
    return SessionContext(session)


def _board() -> TaskBoard:
    """Build (once per request) the task board for the current session."""
    if "board" not in g:
        context = _session_context()
        api = TaskApiClient(
            current_app.config["TASK_SERVICE_URL"],
            context,
            timeout=current_app.config["TASK_SERVICE_TIMEOUT"],
        )
        g.board = TaskBoard(api, PendingDueDates(context))
    return g.board


def _verify_session_token() -> dict[str, Any] | None:
    token = _session_context().token
    if token is None:
        return None
    return verify_token(token, current_app.config["JWT_PUBLIC_KEY"], algorithms=["RS256"])


def _response_error_message(response: requests.Response, default: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return default
    message = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(message, str) and message.strip():
        return message
    return default


def _to_login():
    flash(SESSION_EXPIRED_MESSAGE, "error")
    return redirect(url_for("views.login"))


def _render_index(rows: list, *, status_code: int = 200):
    return (
        render_template("index.html", rows=rows),
        status_code,
    )


def login_required(view_func):
    """
    Require a valid session token before running a view.

    On success ``g.user_id`` and ``g.email`` are set.  On failure the
    session is invalidated and the user is redirected to the login page.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        payload = _verify_session_token()
        if payload is None:
            _session_context().invalidate()
            return redirect(url_for("views.login"))

        g.user_id = payload["user_id"]
        g.email = payload["email"]
        return view_func(*args, **kwargs)

    return wrapper


# =====================================================================
# Authentication Routes
# =====================================================================


@views_bp.route("/health", methods=["GET"])
def health_check():
    return {"status": "healthy", "service": "web"}, 200


@views_bp.route("/login", methods=["GET"])
def login():
    if _verify_session_token() is not None:
        return redirect(url_for("views.index"))
    return render_template("login.html")


@views_bp.route("/login", methods=["POST"])
def login_submit():
    """
    Exchange the submitted credentials for a token and start a session.

    Returns:
        A redirect to the task list on success, otherwise the login page
        with a flash message and a status describing the failure.
    """
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    if not email or not password:
        flash("Email and password are required.", "error")
        return render_template("login.html"), 400

    try:
        response = requests.post(
            _auth_service_url("/api/auth/login"),
            json={"email": email, "password": password},
            timeout=current_app.config["AUTH_SERVICE_TIMEOUT"],
        )
    except requests.Timeout:
        flash("Login service timed out. Please try again.", "error")
        return render_template("login.html"), 503
    except requests.RequestException:
        flash("Login service unavailable. Please try again later.", "error")
        return render_template("login.html"), 503

    if response.status_code == 200:
        token = response.json().get("token")
        if not token:
            flash("Invalid login response received.", "error")
            return render_template("login.html"), 502
        _session_context().start(token)
        flash("Logged in successfully.", "success")
        return redirect(url_for("views.index"))

    if response.status_code == 401:
        flash("Invalid email or password.", "error")
        return render_template("login.html"), 401

    logger.error("Unexpected login response status %s", response.status_code)
    flash("Unexpected login error. Please try again.", "error")
    return render_template("login.html"), 502


@views_bp.route("/register", methods=["GET"])
def register():
    if _verify_session_token() is not None:
        return redirect(url_for("views.index"))
    return render_template("register.html")


@views_bp.route("/register", methods=["POST"])
def register_submit():
    """Forward a new account to the auth service, then send the user to log in."""
    name = request.form.get("name", "").strip()
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")

    if not name or not email or not password:
        flash("Name, email and password are required.", "error")
        return render_template("register.html"), 400

    try:
        response = requests.post(
            _auth_service_url("/api/auth/register"),
            json={"name": name, "email": email, "password": password},
            timeout=current_app.config["AUTH_SERVICE_TIMEOUT"],
        )
    except requests.Timeout:
        flash("Registration service timed out. Please try again.", "error")
        return render_template("register.html"), 503
    except requests.RequestException:
        flash("Registration service unavailable. Please try again later.", "error")
        return render_template("register.html"), 503

    if response.status_code == 201:
        flash("Registration successful. Please log in.", "success")
        return redirect(url_for("views.login"))

    if response.status_code in {400, 409}:
        flash(_response_error_message(response, "Registration failed."), "error")
        return render_template("register.html"), response.status_code

    flash("Unexpected registration error. Please try again.", "error")
    return render_template("register.html"), 502


@views_bp.route("/logout", methods=["POST"])
def logout():
    _session_context().invalidate()
    flash("Logged out. Session cleared.", "success")
    return redirect(url_for("views.login"))


# =====================================================================
# Task Routes
# =====================================================================


@views_bp.route("/")
@login_required
def index():
    """
    Render the current user's tasks.

    Returns:
        The task list, or an empty list page with status 503 when the task
        service is unreachable (502 for any other failure).
    """
    try:
        rows = _board().rows()
    except Unauthorized:
        return _to_login()
    except ServiceUnavailable as error:
        flash(error.message, "error")
        return _render_index([], status_code=503)
    except TaskClientError as error:
        flash(error.message, "error")
        return _render_index([], status_code=502)
    return _render_index(rows)


@views_bp.route("/tasks/new")
@login_required
def new_task():
    return render_template(
        "task_form.html",
        task=None,
        form_action=url_for("views.create_task"),
        form_title="Add new task",
    )


def _read_task_form() -> tuple[str, Any]:
    """
    Read description and due date from a submitted task form.

    Raises:
        ValueError: The description is blank or the due date is malformed,
            with a message suitable for flashing.
    """
    description = request.form.get("description", "").strip()
    if not description:
        raise ValueError("Description is required")
    try:
        due_date = parse_datetime_local(request.form.get("due_date"))
    except ValueError as exc:
        raise ValueError("Invalid date format") from exc
    return description, due_date


@views_bp.route("/tasks", methods=["POST"])
@login_required
def create_task():
    try:
        description, due_date = _read_task_form()
    except ValueError as error:
        flash(str(error), "error")
        return redirect(url_for("views.new_task"))

    try:
        _board().create(description, due_date)
    except Unauthorized:
        return _to_login()
    except TaskClientError as error:
        flash(error.message, "error")
        return redirect(url_for("views.new_task"))

    flash("Task created successfully", "success")
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/<int:task_id>/edit")
@login_required
def edit_task(task_id: int):
    """Render the edit form pre-populated with the task as the service stores it."""
    try:
        task = _board().get(task_id)
    except Unauthorized:
        return _to_login()
    except (NotFound, Forbidden):
        abort(404)
    except TaskClientError as error:
        flash(error.message, "error")
        return redirect(url_for("views.index"))

    return render_template(
        "task_form.html",
        task=task,
        form_action=url_for("views.update_task", task_id=task_id),
        form_title=f"Edit task #{task_id}",
    )


@views_bp.route("/tasks/<int:task_id>/update", methods=["POST"])
@login_required
def update_task(task_id: int):
    """Save the edit form; an empty due date field clears the due date."""
    try:
        description, due_date = _read_task_form()
    except ValueError as error:
        flash(str(error), "error")
        return redirect(url_for("views.edit_task", task_id=task_id))

    try:
        _board().update(task_id, description, due_date)
    except Unauthorized:
        return _to_login()
    except (NotFound, Forbidden):
        abort(404)
    except TaskClientError as error:
        flash(error.message, "error")
        return redirect(url_for("views.edit_task", task_id=task_id))

    flash("Task updated successfully", "success")
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/<int:task_id>/delete", methods=["POST"])
@login_required
def delete_task(task_id: int):
    try:
        _board().delete(task_id)
    except Unauthorized:
        return _to_login()
    except TaskClientError as error:
        flash(error.message, "error")
        return redirect(url_for("views.index"))

    flash("Task deleted successfully", "success")
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/<int:task_id>/due-date", methods=["POST"])
@login_required
def due_date(task_id: int):
    """
    Stage and/or save a row's due date.

    ``action=set`` only stages the submitted value.  ``action=save`` stages
    the submitted value when one is given, then saves whatever is pending.
    """
    action = request.form.get("action", "set")
    if action not in {"set", "save"}:
        flash("Invalid due date action", "error")
        return redirect(url_for("views.index"))

    try:
        value = parse_datetime_local(request.form.get("due_date"))
    except ValueError:
        flash("Invalid date format", "error")
        return redirect(url_for("views.index"))

    board = _board()
    try:
        if action == "set" or value is not None:
            board.pick_due_date(task_id, value)
        if action == "save":
            board.save_due_date(task_id)
    except Unauthorized:
        return _to_login()
    except InvalidTransition:
        flash("Pick a due date before saving", "error")
        return redirect(url_for("views.index"))
    except TaskClientError as error:
        flash(error.message, "error")
        return redirect(url_for("views.index"))

    if action == "save":
        flash("Due date saved", "success")
    return redirect(url_for("views.index"))
