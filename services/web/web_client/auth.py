"""
Session token verification for the web client.

The client checks the token in its session cookie before spending a round
trip on the task service.  It only needs the public half of the auth
service's RS256 key pair.
"""

from __future__ import annotations

from typing import Any

import jwt
from flask import current_app

DEFAULT_ALLOWED_ALGORITHMS = ["RS256"]
REQUIRED_TOKEN_CLAIMS = ["user_id", "email", "iat", "exp"]


def verify_token(
    token: str,
    public_key: str,
    algorithms: list[str] | None = None,
) -> dict[str, Any] | None:
    """
    Decode and validate a JWT, returning the payload on success.

    Args:
        token: The compact-JWS token string.
        public_key: RSA public key in PEM format.
        algorithms: Allowed signing algorithms, ``["RS256"]`` when ``None``.

    Returns:
        The decoded payload, or ``None`` if the token is expired, malformed,
        badly signed or carries a malformed ``user_id`` / ``email`` claim.
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
