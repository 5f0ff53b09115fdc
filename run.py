"""Entry point for the Leylines server.

This script serves the FastAPI application (JSON API and board UI) with
Uvicorn.  It is intended to be executed from the project root, for
example under Docker, where you only specify a single Python file to
run.

Configuration such as ``DATABASE_URL``, ``HOST``, ``PORT`` and
``LOG_LEVEL`` is read from the environment, see
``leylines_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from leylines_api.app.core.config import settings
from leylines_api.app.main import app


async def run_server() -> None:
    """Start the application using Uvicorn.

    Host and port come from ``settings.host`` and ``settings.port``.
    Defaults are ``0.0.0.0`` and ``5000``.
    """
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


async def main() -> None:
    try:
        await run_server()
    except Exception:
        logging.exception("Exception in service")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
