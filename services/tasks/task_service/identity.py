"""
Bearer-token identity resolution for the task service.

Tokens are issued by the auth service and signed with its RS256 private
key; this service only holds the public half.  ``resolve_identity`` turns a
token into the owner id every task operation is scoped by, and
``require_auth`` applies it to a route before any business logic runs.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import jwt
from flask import current_app, g, request

from .errors import Unauthorized

DEFAULT_ALLOWED_ALGORITHMS = ["RS256"]
REQUIRED_TOKEN_CLAIMS = ["user_id", "email", "iat", "exp"]


def verify_token(
    token: str,
    public_key: str,
    algorithms: list[str] | None = None,
) -> dict[str, Any] | None:
    """
    Decode and validate a JWT, returning the payload on success.

    Checks the signature, ``exp`` / ``iat`` (with the configured clock-skew
    leeway) and the presence of all required claims, then requires
    ``user_id`` to be a positive integer and ``email`` a non-blank string.

    Args:
        token: The encoded JWT.
        public_key: RSA public key in PEM format.
        algorithms: Acceptable algorithms, ``["RS256"]`` by default so that
            ``none`` / HMAC tokens are refused.

    Returns:
        The decoded payload, or ``None`` if verification fails.
    """
    try:
        decoded = jwt.decode(
            token,
            public_key,
            algorithms=algorithms or DEFAULT_ALLOWED_ALGORITHMS,
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except jwt.InvalidTokenError:
        return None

    user_id = decoded.get("user_id")
    email = decoded.get("email")

    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        return None
    if not isinstance(email, str) or not email.strip():
        return None
    return decoded


def extract_token(auth_header: str | None) -> str | None:
    """
    Pull the token out of an ``Authorization`` header value.

    Accepts ``Bearer <token>`` as well as a bare ``<token>``.  Any other
    scheme, or an empty value, yields ``None``.
    """
    header = (auth_header or "").strip()
    if not header:
        return None
    scheme, _, rest = header.partition(" ")
    if not rest:
        return scheme
    if scheme.lower() != "bearer":
        return None
    return rest.strip() or None


def resolve_identity(token: str | None) -> int:
    """
    Resolve a bearer token to the owner id it was issued for.

    Raises:
        Unauthorized: The token is missing or fails verification.
    """
    if not token:
        raise Unauthorized()
    payload = verify_token(
        token,
        current_app.config["JWT_PUBLIC_KEY"],
        algorithms=DEFAULT_ALLOWED_ALGORITHMS,
    )
    if payload is None:
        raise Unauthorized("Invalid or expired token")
    return payload["user_id"]


def require_auth(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Reject the request with ``Unauthorized`` unless it carries a valid token.

    On success the owner id is stored as ``g.owner_id`` for the wrapped view.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        token = extract_token(request.headers.get("Authorization"))
        g.owner_id = resolve_identity(token)
        return view_func(*args, **kwargs)

    return wrapper
