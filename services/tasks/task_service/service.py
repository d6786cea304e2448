"""
Task service operations.

Business rules on top of the task store: every operation runs on behalf of
an owner, and single-task operations distinguish a missing task
(``NotFound``) from somebody else's task (``Forbidden``).
"""

from __future__ import annotations

import logging

from .errors import Forbidden, NotFound
from .models import Task
from .payloads import TaskChanges, TaskDraft
from .store import TaskStore

logger = logging.getLogger(__name__)


class TaskService:
    """Create, read, update and delete tasks for an authenticated owner."""

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    def list_tasks(self, owner_id: int) -> list[Task]:
        """Return all of the owner's tasks, oldest first.  May be empty."""
        return self._store.list_for_owner(owner_id)

    def get_task(self, owner_id: int, task_id: int) -> Task:
        return self._owned_task(owner_id, task_id)

    def create_task(self, owner_id: int, draft: TaskDraft) -> Task:
        task = self._store.add(owner_id, draft.description, draft.due_date)
        logger.info("Created task id=%s for owner_id=%s", task.id, owner_id)
        return task

    def update_task(self, owner_id: int, task_id: int, changes: TaskChanges) -> Task:
        """
        Apply ``changes`` to one of the owner's tasks.

        Raises:
            NotFound: No task with ``task_id`` exists.
            Forbidden: The task belongs to another owner.
        """
        task = self._owned_task(owner_id, task_id)
        task = self._store.apply(task, changes)
        logger.info("Updated task id=%s for owner_id=%s", task_id, owner_id)
        return task

    def delete_task(self, owner_id: int, task_id: int) -> None:
        task = self._owned_task(owner_id, task_id)
        self._store.delete(task)
        logger.info("Deleted task id=%s for owner_id=%s", task_id, owner_id)

    def _owned_task(self, owner_id: int, task_id: int) -> Task:
        task = self._store.get(task_id)
        if task is None:
            raise NotFound()
        if task.owner_id != owner_id:
            logger.warning(
                "owner_id=%s denied access to task id=%s", owner_id, task_id
            )
            raise Forbidden()
        return task
