"""
Per-user session context.

:class:`SessionContext` wraps whatever mapping holds the user's session
(the Flask session cookie in the running app, a plain dict in tests) and
is handed explicitly to every component that talks to the task service.
``invalidate`` is the only way session state is torn down.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
PENDING_DUE_DATES_KEY = "pending_due_dates"


class SessionContext:
    """The bearer token and the pending due-date edits of one user session."""

    def __init__(self, store: MutableMapping[str, Any]) -> None:
        self._store = store

    @property
    def token(self) -> str | None:
        return self._store.get(TOKEN_KEY) or None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def start(self, token: str) -> None:
        """Begin a session for a freshly issued token, dropping leftovers of any previous one."""
        if not isinstance(token, str) or not token.strip():
            raise ValueError("token must be a non-empty string")
        self._store.pop(PENDING_DUE_DATES_KEY, None)
        self._store[TOKEN_KEY] = token

    def authorization_header(self) -> dict[str, str]:
        token = self.token
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def invalidate(self) -> None:
        """Forget the token and every pending due-date edit."""
        if self.is_authenticated:
            logger.info("Invalidating client session")
        self._store.pop(TOKEN_KEY, None)
        self._store.pop(PENDING_DUE_DATES_KEY, None)

    def pending_entries(self) -> dict[str, dict[str, Any]]:
        """Return a copy of the stored pending due-date entries keyed by task id."""
        return dict(self._store.get(PENDING_DUE_DATES_KEY) or {})

    def store_pending_entries(self, entries: dict[str, dict[str, Any]]) -> None:
        # Always assign a new dict so Flask notices the session changed.
        if entries:
            self._store[PENDING_DUE_DATES_KEY] = dict(entries)
        else:
            self._store.pop(PENDING_DUE_DATES_KEY, None)
