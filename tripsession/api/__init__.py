"""HTTP surface for the session store."""

from tripsession.api.registry import SessionNotFound, SessionRegistry
from tripsession.api.rest import create_app

__all__ = ["SessionNotFound", "SessionRegistry", "create_app"]
