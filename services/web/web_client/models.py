"""
Client-side task models.

``TaskView`` mirrors the task service's JSON contract.  It is declared here
rather than imported from the task service so each service can be deployed
and versioned on its own.

``PendingDueDates`` is the per-row state machine for due dates the user has
picked but not yet saved::

    IDLE ──pick──> PENDING_EDIT ──begin_save──> SAVING ──saved──> IDLE
                   │    ^   │                     │
                   └pick┘   └─discard─> IDLE      └save_failed──> PENDING_EDIT

A pending value only ever comes from the user; it is never seeded from the
task's persisted due date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .formatting import parse_iso_datetime, to_utc_iso
from .session import SessionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskView:
    """A task as returned by the task service."""

    id: int
    owner_id: int
    description: str
    due_date: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TaskView:
        """
        Build a view from the API's camelCase payload.

        Raises:
            KeyError, TypeError, ValueError: The payload does not follow the
                task contract.
        """
        return cls(
            id=int(data["id"]),
            owner_id=int(data["ownerId"]),
            description=str(data["description"]),
            due_date=parse_iso_datetime(data.get("dueDate")),
            created_at=parse_iso_datetime(data["createdAt"]),
            updated_at=parse_iso_datetime(data["updatedAt"]),
        )


class RowState(str, Enum):
    """Where a row's pending due date is in its edit/save cycle."""

    IDLE = "idle"
    PENDING_EDIT = "pending_edit"
    SAVING = "saving"


class InvalidTransition(Exception):
    """A pending due-date move that the row's current state does not allow."""

    def __init__(self, task_id: int, state: RowState, event: str) -> None:
        super().__init__(f"Cannot {event} due date of task {task_id} while {state.value}")
        self.task_id = task_id
        self.state = state
        self.event = event


@dataclass(frozen=True)
class TaskRow:
    """Everything the task list needs to render one task."""

    number: int
    task: TaskView
    state: RowState
    pending_due_date: datetime | None


class PendingDueDates:
    """
    Pending due dates keyed by task id, persisted in the session.

    Every read and write goes straight through the :class:`SessionContext`,
    so invalidating the session also forgets every pending edit.
    """

    def __init__(self, session: SessionContext) -> None:
        self._session = session

    def state(self, task_id: int) -> RowState:
        entry = self._session.pending_entries().get(str(task_id))
        if entry is None:
            return RowState.IDLE
        return RowState(entry["state"])

    def value(self, task_id: int) -> datetime | None:
        entry = self._session.pending_entries().get(str(task_id))
        if entry is None:
            return None
        return parse_iso_datetime(entry["value"])

    def pick(self, task_id: int, value: datetime | None) -> RowState:
        """
        Stage ``value`` as the row's pending due date.

        Picking nothing discards a pending edit and is a no-op on an idle
        row.  Picking while a save is in flight is not allowed.
        """
        state = self.state(task_id)
        if state is RowState.SAVING:
            raise InvalidTransition(task_id, state, "pick")
        if value is None:
            if state is RowState.PENDING_EDIT:
                return self.discard(task_id)
            return RowState.IDLE
        self._write(task_id, RowState.PENDING_EDIT, value)
        return RowState.PENDING_EDIT

    def discard(self, task_id: int) -> RowState:
        self._expect(task_id, RowState.PENDING_EDIT, "discard")
        self._remove(task_id)
        return RowState.IDLE

    def begin_save(self, task_id: int) -> datetime:
        """Move the row to SAVING and return the value that should be saved."""
        self._expect(task_id, RowState.PENDING_EDIT, "save")
        value = self.value(task_id)
        self._write(task_id, RowState.SAVING, value)
        return value

    def saved(self, task_id: int) -> RowState:
        """The server acknowledged the save; the pending value is cleared."""
        self._expect(task_id, RowState.SAVING, "complete saving")
        self._remove(task_id)
        return RowState.IDLE

    def save_failed(self, task_id: int) -> RowState:
        """The save did not go through; keep the value so the user can retry."""
        self._expect(task_id, RowState.SAVING, "fail saving")
        self._write(task_id, RowState.PENDING_EDIT, self.value(task_id))
        return RowState.PENDING_EDIT

    def forget(self, task_id: int) -> None:
        """Drop whatever is pending for a task that no longer exists."""
        self._remove(task_id)

    def _expect(self, task_id: int, expected: RowState, event: str) -> None:
        state = self.state(task_id)
        if state is not expected:
            raise InvalidTransition(task_id, state, event)

    def _write(self, task_id: int, state: RowState, value: datetime) -> None:
        entries = self._session.pending_entries()
        entries[str(task_id)] = {"state": state.value, "value": to_utc_iso(value)}
        self._session.store_pending_entries(entries)
        logger.debug("Task %s due date now %s", task_id, state.value)

    def _remove(self, task_id: int) -> None:
        entries = self._session.pending_entries()
        if entries.pop(str(task_id), None) is not None:
            self._session.store_pending_entries(entries)
