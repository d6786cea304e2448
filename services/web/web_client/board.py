"""
Task board controller.

:class:`TaskBoard` owns the client's view of the current user's tasks.  The
task list is a cache: it is fetched on first read and dropped after every
mutation, so the next read sees exactly what the task service stores.
Nothing is ever removed from or patched into the cached list locally.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from .api import TaskApiClient
from .errors import NotFound, TaskClientError, Unauthorized
from .models import PendingDueDates, RowState, TaskRow, TaskView

logger = logging.getLogger(__name__)


class BoardState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    LOGGED_OUT = "logged_out"


class TaskBoard:
    """
    Fetch, render and mutate the current user's tasks.

    Any ``Unauthorized`` from the task service moves the board to
    ``LOGGED_OUT`` (the API client has already invalidated the session) and
    is re-raised so the caller can send the user to the login page.  Other
    client errors propagate with the board's state unchanged.
    """

    def __init__(self, api: TaskApiClient, pending: PendingDueDates) -> None:
        self._api = api
        self._pending = pending
        self._tasks: list[TaskView] | None = None
        self.state = BoardState.IDLE

    @property
    def tasks(self) -> list[TaskView]:
        """The cached task list, fetched from the task service when stale."""
        if self._tasks is None:
            self.refresh()
        return list(self._tasks)

    def refresh(self) -> list[TaskView]:
        self.state = BoardState.LOADING
        try:
            tasks = self._api.list_tasks()
        except Unauthorized:
            self._logged_out()
            raise
        except TaskClientError:
            self.state = BoardState.IDLE
            raise
        self._tasks = tasks
        self.state = BoardState.READY
        return list(tasks)

    def invalidate(self) -> None:
        """Drop the cached list; the next read fetches it again."""
        self._tasks = None
        if self.state is BoardState.READY:
            self.state = BoardState.IDLE

    def rows(self) -> list[TaskRow]:
        """Render-ready rows numbered from 1 in list order."""
        return [
            TaskRow(
                number=index,
                task=task,
                state=self._pending.state(task.id),
                pending_due_date=self._pending.value(task.id),
            )
            for index, task in enumerate(self.tasks, start=1)
        ]

    def get(self, task_id: int) -> TaskView:
        """Fetch one task straight from the task service, bypassing the cache."""
        return self._guard(self._api.get_task, task_id)

    # =================================================================
    # Mutations
    # =================================================================

    def create(self, description: str, due_date: datetime | None = None) -> TaskView:
        task = self._guard(self._api.create_task, description, due_date)
        self.invalidate()
        return task

    def update(self, task_id: int, description: str, due_date: datetime | None) -> TaskView:
        task = self._guard(
            self._api.update_task, task_id, description=description, due_date=due_date
        )
        self.invalidate()
        return task

    def delete(self, task_id: int) -> None:
        """Delete on the server, then re-fetch instead of removing the row locally."""
        self._guard(self._api.delete_task, task_id)
        self._pending.forget(task_id)
        self.invalidate()

    def pick_due_date(self, task_id: int, value: datetime | None) -> RowState:
        """Stage a due date for ``task_id``; nothing is sent to the server."""
        return self._pending.pick(task_id, value)

    def save_due_date(self, task_id: int) -> TaskView:
        """
        Persist the row's pending due date together with its current description.

        Raises:
            NotFound: ``task_id`` is not in the current task list; whatever
                was pending for it is dropped.
            InvalidTransition: The row has no pending due date.
        """
        try:
            task = self._find(task_id)
        except NotFound:
            self._pending.forget(task_id)
            raise
        value = self._pending.begin_save(task_id)
        try:
            updated = self._api.update_task(
                task_id, description=task.description, due_date=value
            )
        except Unauthorized:
            self._logged_out()
            raise
        except TaskClientError:
            self._pending.save_failed(task_id)
            raise
        self._pending.saved(task_id)
        self.invalidate()
        logger.info("Saved due date of task %s", task_id)
        return updated

    def _find(self, task_id: int) -> TaskView:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise NotFound()

    def _guard(self, operation, *args, **kwargs):
        try:
            return operation(*args, **kwargs)
        except Unauthorized:
            self._logged_out()
            raise

    def _logged_out(self) -> None:
        self._tasks = None
        self.state = BoardState.LOGGED_OUT
