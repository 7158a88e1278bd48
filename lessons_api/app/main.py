"""
Main entrypoint for the Lessons API.

This module assembles the FastAPI application, sets up logging and
includes the versioned routers.  ``create_app`` builds the app around
a ``LocalStore``; the module-level ``app`` uses the store described by
the settings, so it can be served directly::

    uvicorn lessons_api.app.main:app --reload
"""

from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.logging_config import setup_logging
from .core.store import LocalStore


def create_app(store: Optional[LocalStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store:
        The store the routes read and write.  Defaults to one built
        from ``settings`` (SQLite unless ``STORAGE_BACKEND=memory``).
    """
    # Logging first so that building the store can log.
    setup_logging(logfile=settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.store = store or LocalStore.from_settings()
    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
