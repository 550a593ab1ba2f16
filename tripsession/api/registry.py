"""Session registry: one Session per conversation id.

LRU-bounded: creating a session at capacity evicts the least recently used
one. Every lookup refreshes recency.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any
from uuid import uuid4

from tripsession.config import Settings
from tripsession.session import Session

logger = logging.getLogger(__name__)


class SessionNotFound(KeyError):
    """No session is registered under the requested id."""

    def __str__(self) -> str:
        return f"Unknown session: {self.args[0]}"


class SessionRegistry:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self, session_id: str | None = None, window: int | None = None) -> str:
        """Register a fresh session, replacing any existing one with the same id."""
        session_id = session_id or str(uuid4())
        session = Session(window if window is not None else self._settings.window)
        self._put(session_id, session)
        logger.info("Created session %s (window=%d)", session_id, session.window)
        return session_id

    def get(self, session_id: str) -> Session:
        """Look up a session and mark it most recently used.

        Raises:
            SessionNotFound: no such session.
        """
        try:
            self._sessions.move_to_end(session_id)
        except KeyError:
            raise SessionNotFound(session_id) from None
        return self._sessions[session_id]

    def restore(self, session_id: str, payload: Any) -> Session:
        """Replace ``session_id`` with a session rebuilt from serialize() output.

        Raises:
            ParseError: payload is not a valid snapshot.
        """
        session = Session.deserialize(payload)
        self._put(session_id, session)
        logger.info(
            "Restored session %s (window=%d, turns=%d)",
            session_id, session.window, len(session),
        )
        return session

    def drop(self, session_id: str) -> None:
        """Remove a session.

        Raises:
            SessionNotFound: no such session.
        """
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
        logger.info("Dropped session %s", session_id)

    def _put(self, session_id: str, session: Session) -> None:
        self._sessions.pop(session_id, None)
        # Evict least recently used if at capacity
        while len(self._sessions) >= self._settings.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted idle session %s", evicted)
        self._sessions[session_id] = session
