"""Shared fixtures for the session store tests."""

import pytest

from tripsession.config import Settings
from tripsession.session import Session


@pytest.fixture
def settings() -> Settings:
    """Defaults only: ignores any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def session() -> Session:
    """Empty session with the short structured-ingestion window."""
    return Session(10)
