"""
Database model for the task store.

A ``Task`` is a to-do record owned by exactly one user.  The owner is set
once at creation and can never be reassigned; every query in the service
layer is scoped by ``owner_id`` so a user only ever sees their own tasks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import validates

from . import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime | None) -> str | None:
    """
    Serialise a datetime as an ISO-8601 UTC string with a ``Z`` suffix.

    SQLite hands back naive datetimes even for timezone-aware columns, so a
    naive value is taken to be UTC already.  ``2025-03-01T10:00:00Z`` in
    means ``2025-03-01T10:00:00Z`` out.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Auto-incrementing primary key.
        owner_id: Identity of the owning user, as resolved from the bearer
            token.  Indexed for per-owner listing.
        description: Non-blank task text.
        due_date: Optional timezone-aware deadline.
        created_at: Insert timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    __tablename__ = "tasks"
    __table_args__ = (
        db.CheckConstraint(
            "length(trim(description)) > 0", name="ck_tasks_description_not_blank"
        ),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    owner_id: int = db.Column(db.Integer, nullable=False, index=True)
    description: str = db.Column(db.Text, nullable=False)
    due_date: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    @validates("owner_id")
    def _validate_owner_id(self, _key: str, value: int) -> int:
        if self.owner_id is not None and value != self.owner_id:
            raise ValueError("Task ownership cannot be reassigned")
        return value

    def to_dict(self) -> dict[str, Any]:
        """Serialise the task to the JSON shape exposed by the API."""
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "description": self.description,
            "dueDate": to_utc_iso(self.due_date),
            "createdAt": to_utc_iso(self.created_at),
            "updatedAt": to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id} owner={self.owner_id}>"
