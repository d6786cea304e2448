"""
Request-body validation for task endpoints.

Externally supplied JSON is checked here and turned into typed records
(``TaskDraft`` for creation, ``TaskChanges`` for updates) before it reaches
the service layer.  Keys other than ``description`` and ``dueDate`` are
ignored, so identity and system fields can never be mass-assigned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import ValidationError


class _Unset(Enum):
    UNSET = "unset"


# Marks a field that was omitted from an update body (as opposed to null).
UNSET = _Unset.UNSET

DUE_DATE_FORMAT_ERROR = "Invalid dueDate format. Use ISO-8601 (YYYY-MM-DDTHH:MM:SSZ)"


@dataclass(frozen=True)
class TaskDraft:
    """Validated input for creating a task."""

    description: str
    due_date: datetime | None = None


@dataclass(frozen=True)
class TaskChanges:
    """
    Validated input for updating a task.

    Fields left as ``UNSET`` were not part of the request and stay
    untouched; ``due_date=None`` clears the stored due date.
    """

    description: str | _Unset = UNSET
    due_date: datetime | None | _Unset = UNSET

    def is_empty(self) -> bool:
        return self.description is UNSET and self.due_date is UNSET


def ensure_utc(value: datetime) -> datetime:
    """Normalise a datetime to UTC, treating naive values as UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_due_date(value: Any) -> datetime | None:
    """
    Parse an optional ISO-8601 due date into a UTC datetime.

    Args:
        value: ``None`` or an ISO-8601 string (a trailing ``Z`` is accepted).

    Returns:
        A timezone-aware UTC datetime, or ``None``.

    Raises:
        ValidationError: If the value is neither ``None`` nor a parseable
            ISO-8601 string.
    """
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(DUE_DATE_FORMAT_ERROR)
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        return ensure_utc(parsed)
    except (ValueError, OverflowError) as exc:
        raise ValidationError(DUE_DATE_FORMAT_ERROR) from exc


def _parse_description(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("'description' is required")
    return value


def _require_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_draft(data: Any) -> TaskDraft:
    """Validate a create-task body and return a ``TaskDraft``."""
    body = _require_object(data)
    return TaskDraft(
        description=_parse_description(body.get("description")),
        due_date=parse_due_date(body.get("dueDate")),
    )


def parse_changes(data: Any) -> TaskChanges:
    """
    Validate an update-task body and return a ``TaskChanges``.

    At least one of ``description`` or ``dueDate`` must be present.  A
    present ``description`` follows the same rules as on creation.
    """
    body = _require_object(data)
    changes = TaskChanges(
        description=(
            _parse_description(body["description"]) if "description" in body else UNSET
        ),
        due_date=parse_due_date(body["dueDate"]) if "dueDate" in body else UNSET,
    )
    if changes.is_empty():
        raise ValidationError("At least one of 'description' or 'dueDate' is required")
    return changes
