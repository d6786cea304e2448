"""
Bearer token issuance and verification.

Tokens are RS256-signed JWTs.  Only this service holds the private key;
every verifier (this service's ``/verify`` endpoint and the task service)
needs nothing but the public key.

Claims:
    - ``user_id``: integer primary key of the user; the task service uses
      it as the task owner id.
    - ``email``: the login identifier, carried so clients can greet the
      user without another round-trip.
    - ``iat`` / ``exp``: issued-at and expiry, in UTC epoch seconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

TOKEN_ALGORITHM = "RS256"
REQUIRED_TOKEN_CLAIMS = ["user_id", "email", "iat", "exp"]


def create_token(
    user_id: int,
    email: str,
    private_key: str,
    expiry_hours: int,
) -> str:
    """
    Create an RS256-signed JWT for an authenticated user.

    Args:
        user_id: Primary key of the user.  Must be a positive integer.
        email: The user's email address.  Must be a non-empty string.
        private_key: RSA private key in PEM format.
        expiry_hours: Hours from now until the token expires.  Negative
            values produce an already-expired token.

    Returns:
        A compact JWS string for use in ``Authorization`` headers.

    Raises:
        ValueError: If *user_id* is not positive or *email* is blank.
    """
    if int(user_id) <= 0:
        raise ValueError("user_id must be a positive integer")
    if not isinstance(email, str) or not email.strip():
        raise ValueError("email must be a non-empty string")

    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(hours=int(expiry_hours))

    payload: dict[str, Any] = {
        "user_id": int(user_id),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, private_key, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str, public_key: str, leeway: int = 30) -> dict[str, Any]:
    """
    Decode a token issued by :func:`create_token` and check its identity claims.

    Raises:
        jwt.InvalidTokenError: Bad signature, expired, missing claims, or a
            ``user_id`` / ``email`` claim of the wrong shape.
    """
    payload = jwt.decode(
        token,
        public_key,
        algorithms=[TOKEN_ALGORITHM],
        options={"require": REQUIRED_TOKEN_CLAIMS},
        leeway=leeway,
    )
    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        raise jwt.InvalidTokenError("Invalid user_id claim")
    if not isinstance(payload.get("email"), str) or not payload["email"].strip():
        raise jwt.InvalidTokenError("Invalid email claim")
    return payload
