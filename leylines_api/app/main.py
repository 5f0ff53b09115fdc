"""
Main entrypoint for the Leylines API.

This module assembles the FastAPI application: logging, CORS, request
logging, error handlers, the JSON API under ``/api`` and the board UI
pages.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``, e.g.::

    uvicorn leylines_api.app.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api.v1.endpoints import health
from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import close_connection, init_db
from .core.errors import register_exception_handlers
from .core.logging_config import log_requests, setup_logging
from .web import views
from .web.views import APP_DIR


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(v1_router, prefix="/api")
    app.include_router(views.router)
    app.mount("/static", StaticFiles(directory=str(APP_DIR / "static")), name="static")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Open the shared connection and apply migrations before the
        # first request instead of during it.
        init_db()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        close_connection()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
