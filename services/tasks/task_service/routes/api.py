"""
REST API endpoints for the task service.

Endpoints:
    GET    /api/health          - Service health check (public)
    GET    /api/tasks           - List the caller's tasks
    GET    /api/tasks/<id>      - Retrieve one task
    POST   /api/tasks           - Create a task
    PUT    /api/tasks/<id>      - Update description and/or due date
    DELETE /api/tasks/<id>      - Delete a task

Every task endpoint is wrapped in ``require_auth``; an invalid or missing
token is rejected before the request body is even read.
"""

from __future__ import annotations

import logging
import os

from flask import Blueprint, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from .. import db
from ..errors import TaskServiceError
from ..identity import require_auth
from ..payloads import parse_changes, parse_draft
from ..service import TaskService
from ..store import TaskStore

logger = logging.getLogger(__name__)

api_bp = Blueprint("task_api", __name__)


def _task_service() -> TaskService:
    return TaskService(TaskStore(db.session))


# =====================================================================
# API Endpoints
# =====================================================================


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Public liveness check for load balancers and orchestrators."""
    return (
        jsonify(
            {
                "status": "healthy",
                "service": "tasks",
                "environment": os.getenv("ENVIRONMENT", "unknown"),
            }
        ),
        200,
    )


@api_bp.route("/tasks", methods=["GET"])
@require_auth
def list_tasks() -> tuple[Response, int]:
    """
    List all tasks of the authenticated owner in creation order.

    Returns:
        JSON object with a ``tasks`` array and its ``count``.
    """
    logger.info("GET /api/tasks - listing tasks for owner_id=%s", g.owner_id)
    tasks = _task_service().list_tasks(g.owner_id)
    return jsonify({"tasks": [task.to_dict() for task in tasks], "count": len(tasks)}), 200


@api_bp.route("/tasks/<int:task_id>", methods=["GET"])
@require_auth
def get_task(task_id: int) -> tuple[Response, int]:
    task = _task_service().get_task(g.owner_id, task_id)
    return jsonify(task.to_dict()), 200


@api_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task() -> tuple[Response, int]:
    """
    Create a task for the authenticated owner.

    Expects ``{"description": str, "dueDate": iso-8601 | null}`` with
    ``dueDate`` optional.

    Returns:
        The created task with status 201.
    """
    draft = parse_draft(request.get_json(silent=True))
    task = _task_service().create_task(g.owner_id, draft)
    return jsonify(task.to_dict()), 201


@api_bp.route("/tasks/<int:task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: int) -> tuple[Response, int]:
    """
    Update a task's description and/or due date.

    Omitted fields are left unchanged; ``"dueDate": null`` clears the due
    date.  The body is validated before the task is looked up.
    """
    changes = parse_changes(request.get_json(silent=True))
    task = _task_service().update_task(g.owner_id, task_id, changes)
    return jsonify(task.to_dict()), 200


@api_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: int) -> tuple[Response, int]:
    _task_service().delete_task(g.owner_id, task_id)
    return jsonify({"message": "Task deleted successfully"}), 200


# =====================================================================
# Error Handlers
# =====================================================================


@api_bp.errorhandler(TaskServiceError)
def task_service_error(error: TaskServiceError) -> tuple[Response, int]:
    """Render a service error as its JSON envelope and status code."""
    return jsonify(error.to_dict()), error.status_code


@api_bp.app_errorhandler(404)
@api_bp.app_errorhandler(405)
def http_error(error: HTTPException) -> tuple[Response, int]:
    """Keep routing errors in the same JSON envelope as service errors."""
    code = "not_found" if error.code == 404 else "method_not_allowed"
    return jsonify({"error": error.name, "code": code}), error.code


@api_bp.errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Log the failure and return a generic 500 without internal details."""
    logger.error("Internal server error: %s", error)
    return jsonify({"error": "Internal server error", "code": "internal_error"}), 500
