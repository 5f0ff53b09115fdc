"""
Health and service information endpoints.

These routes carry their full paths and are included on the app
directly rather than through the versioned router.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from leylines_api.app.core.config import settings

router = APIRouter()


@router.get("/api")
async def api_info() -> Dict[str, Any]:
    """Return the service name, version and status."""
    return {
        "message": f"{settings.project_name} API",
        "version": settings.api_version,
        "status": "running",
    }


@router.get("/api/health")
async def health() -> Dict[str, str]:
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
