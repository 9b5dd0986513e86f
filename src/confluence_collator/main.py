"""
Collator Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from .config import get_settings
from .core.errors import unhandled_exception_handler
from .core.logging import configure_logging

from .api import (
    collator_routes,
    health_routes,
)


logger = logging.getLogger("collator.app")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Load settings now so a missing wiki URL or credential fails at startup
    # rather than on the first collection request.
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting confluence-collator for %s", settings.confluence_wiki_url)
    yield
    logger.info("Shutting down confluence-collator")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="confluence-collator",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_routes.router)
    app.include_router(collator_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
