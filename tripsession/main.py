"""tripsession entry point.

  Settings -> SessionRegistry -> App -> Uvicorn
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette

from tripsession.api.registry import SessionRegistry
from tripsession.api.rest import create_app
from tripsession.config import Settings

logger = logging.getLogger(__name__)


def build_app(settings: Settings) -> Starlette:
    """Build the Starlette app around a fresh registry."""
    registry = SessionRegistry(settings)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        # Store on app.state for access in tests
        app.state.registry = registry
        logger.info(
            "Session store ready: window=%d, max_sessions=%d",
            settings.window,
            settings.max_sessions,
        )
        yield
        logger.info("Session store shutting down (%d live sessions)", len(registry))

    return create_app(registry, settings, lifespan=lifespan)


def main() -> None:
    """Entry point: parse settings, build app, run server."""
    settings = Settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    logger.info(
        "Ingestion: structured=%s, history_replay=%s",
        "enabled" if settings.structured_ingestion else "disabled",
        "enabled" if settings.history_replay else "disabled",
    )

    app = build_app(settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
