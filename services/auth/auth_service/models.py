"""
Database models for the auth service.

The only model is :class:`User`: the credentials and the display name
needed for registration, login and token issuance.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


class User(db.Model):
    """
    A registered user.

    Only a one-way password hash is stored, and ``to_dict`` never includes
    it, so the output can go straight into API responses.

    Attributes:
        id: Integer primary key, used as the owner id of the user's tasks.
        name: Display name (max 80 chars).
        email: Unique login identifier (max 120 chars), stored lower-cased.
        password_hash: Werkzeug-generated hash.
        created_at: Account creation time in UTC.
    """

    __tablename__ = "users"

    __table_args__ = (
        db.CheckConstraint("length(name) <= 80", name="ck_users_name_len"),
        db.CheckConstraint("length(email) <= 120", name="ck_users_email_len"),
        db.CheckConstraint(
            "length(password_hash) <= 256", name="ck_users_password_hash_len"
        ),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(80), nullable=False)
    # Every login looks a user up by email
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @staticmethod
    def _to_utc_iso(value: datetime) -> str:
        # SQLite hands back naive datetimes; they were written as UTC.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        else:
            value = value.astimezone(timezone.utc)
        return value.isoformat().replace("+00:00", "Z")

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, Any]:
        """Return the public profile: ``id``, ``name``, ``email``, ``createdAt``."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": self._to_utc_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"
