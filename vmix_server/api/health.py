"""
Health check and endpoint directory
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from vmix_server import __version__
from vmix_server.api.deps import get_settings
from vmix_server.config import Settings


router = APIRouter(tags=["health"])

ENDPOINTS = {
    "health": "/health",
    "upload": "POST /api/v1/upload",
    "elements": "GET /api/v1/elements",
    "select": "PUT /api/v1/element/select/{id}",
    "selected": "GET /api/v1/element/selected",
    "status": "GET /api/v1/status",
    "reset": "DELETE /api/v1/reset",
}


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint"""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.server_name,
    }


# Only registered when no built front-end is served at /
root_router = APIRouter(tags=["health"])


@root_router.get("/")
async def api_directory(settings: Settings = Depends(get_settings)):
    """List the available API endpoints"""
    return {
        "message": f"{settings.server_name} API",
        "version": __version__,
        "endpoints": ENDPOINTS,
    }
