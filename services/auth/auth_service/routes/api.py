"""
Auth service API endpoints.

Endpoints (mounted under ``/api/auth``):
    GET  /health    -- Liveness check.
    POST /register  -- Create a user from ``name``, ``email`` and ``password``.
    POST /login     -- Exchange ``email`` and ``password`` for a bearer token.
    GET  /verify    -- Validate a token and return its identity claims.

All failures use the ``{"error": "..."}`` envelope.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import jwt as pyjwt
from flask import Blueprint, Response, current_app, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .. import db
from ..models import User
from ..tokens import create_token, decode_token

logger = logging.getLogger(__name__)

api_bp = Blueprint("auth_api", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def _json_error(message: str, status_code: int) -> tuple[Response, int]:
    return jsonify({"error": message}), status_code


def _validate_required_fields(
    data: dict[str, Any], required_fields: list[str]
) -> str | None:
    """
    Return an error message for the first missing or blank field, else ``None``.

    A field is valid when it is a string with at least one non-whitespace
    character.
    """
    for field in required_fields:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            return f"'{field}' is required"
    return None


def _normalise_email(value: str) -> str:
    return value.strip().lower()


def _extract_token() -> str | None:
    """Read the token from ``Authorization: Bearer <token>`` or a bare value."""
    header = request.headers.get("Authorization", "").strip()
    if not header:
        return None
    scheme, _, rest = header.partition(" ")
    if not rest:
        return scheme
    if scheme.lower() != "bearer":
        return None
    return rest.strip() or None


# =====================================================================
# API Endpoints
# =====================================================================


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    return jsonify(
        {
            "status": "healthy",
            "service": "auth",
            "environment": os.getenv("ENVIRONMENT", "unknown"),
        }
    ), 200


@api_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new user account.

    Returns:
        201 with ``{"user": ...}`` on success.
        400 if a field is missing, too long or the email is malformed.
        409 if the email is already registered.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object", 400)
    missing = _validate_required_fields(data, ["name", "email", "password"])
    if missing:
        return _json_error(missing, 400)

    name = data["name"].strip()
    email = _normalise_email(data["email"])
    password = data["password"]

    if len(name) > 80:
        return _json_error("name must be 80 characters or less", 400)
    if len(email) > 120:
        return _json_error("email must be 120 characters or less", 400)
    if "@" not in email:
        return _json_error("email must be a valid email address", 400)

    if db.session.scalar(select(User).where(User.email == email)):
        return _json_error("Email already exists", 409)

    user = User(name=name, email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.session.rollback()
        return _json_error("Email already exists", 409)

    logger.info("Registered user_id=%s", user.id)
    return jsonify({"user": user.to_dict()}), 201


@api_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate a user and issue a bearer token.

    The ``"Invalid email or password"`` message is the same for an unknown
    email and a wrong password.

    Returns:
        200 with ``token`` and ``user`` on success.
        400 if a field is missing.
        401 if the credentials do not match.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object", 400)
    missing = _validate_required_fields(data, ["email", "password"])
    if missing:
        return _json_error(missing, 400)

    email = _normalise_email(data["email"])
    user = db.session.scalar(select(User).where(User.email == email))

    if not user or not user.check_password(data["password"]):
        logger.warning("Failed login attempt")
        return _json_error("Invalid email or password", 401)

    token = create_token(
        user_id=user.id,
        email=user.email,
        private_key=current_app.config["JWT_PRIVATE_KEY"],
        expiry_hours=current_app.config["JWT_EXPIRY_HOURS"],
    )
    logger.info("Issued token for user_id=%s", user.id)
    return jsonify({"token": token, "user": user.to_dict()}), 200


@api_bp.route("/verify", methods=["GET"])
def verify() -> tuple[Response, int]:
    """
    Verify a token and return the embedded identity claims.

    Returns:
        200 with ``user_id`` and ``email`` if the token is valid.
        401 if the header is missing or the token is invalid or expired.
    """
    token = _extract_token()
    if token is None:
        return _json_error("Missing or invalid Authorization header", 401)

    try:
        payload = decode_token(
            token,
            current_app.config["JWT_PUBLIC_KEY"],
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except pyjwt.InvalidTokenError:
        return _json_error("Invalid or expired token", 401)

    return jsonify({"user_id": payload["user_id"], "email": payload["email"]}), 200
