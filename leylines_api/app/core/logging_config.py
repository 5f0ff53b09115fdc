"""
Basic logging configuration for the application.

``setup_logging`` installs a console handler and an optional file
handler on the root logger.  ``log_requests`` is the HTTP middleware
that writes one access line per request to ``leylines_api.access``.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from fastapi import Request


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    Parameters
    ----------
    level : str
        Logging level name such as ``"DEBUG"``; case insensitive.
        Unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Optional log file.  Its directory is created when missing.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured (tests, or ``create_app`` called twice).
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # ``log_requests`` writes the access log; uvicorn's own copy is noise.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


async def log_requests(request: Request, call_next):
    """Log one line per handled request with its status and duration."""
    access_logger = logging.getLogger("leylines_api.access")
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    access_logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
