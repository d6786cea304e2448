"""
Persistent task store.

A thin layer over the SQLAlchemy session.  Each mutating call changes one
row and commits exactly once; if the commit fails the session is rolled back
so a partially applied change is never visible.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Task, utcnow
from .payloads import UNSET, TaskChanges

logger = logging.getLogger(__name__)

# Ids outside a signed 64-bit INTEGER column cannot exist.
MAX_TASK_ID = 2**63 - 1


class TaskStore:
    """Task records keyed by id, each owned by one user."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_for_owner(self, owner_id: int) -> list[Task]:
        """Return every task of ``owner_id`` in creation order."""
        stmt = (
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.created_at.asc(), Task.id.asc())
        )
        return list(self._session.scalars(stmt).all())

    def get(self, task_id: int) -> Task | None:
        if not 0 < task_id <= MAX_TASK_ID:
            return None
        return self._session.get(Task, task_id)

    def add(self, owner_id: int, description: str, due_date: datetime | None) -> Task:
        task = Task(owner_id=owner_id, description=description, due_date=due_date)
        self._session.add(task)
        self._commit()
        return task

    def apply(self, task: Task, changes: TaskChanges) -> Task:
        """Write the provided fields of ``changes`` onto ``task``."""
        if changes.description is not UNSET:
            task.description = changes.description
        if changes.due_date is not UNSET:
            task.due_date = changes.due_date
        # Set explicitly: onupdate only fires when some column actually changed.
        task.updated_at = utcnow()
        self._commit()
        return task

    def delete(self, task: Task) -> None:
        self._session.delete(task)
        self._commit()

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError:
            logger.exception("Task store commit failed, rolling back")
            self._session.rollback()
            raise
