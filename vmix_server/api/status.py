"""
Server and store status endpoint
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from vmix_server import __version__
from vmix_server.api.deps import get_settings, get_store
from vmix_server.config import Settings
from vmix_server.core.store import RowStore
from vmix_server.models import api_response


router = APIRouter(prefix="/api/v1", tags=["status"])


@router.get("/status")
async def get_status(
    request: Request,
    store: RowStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Application and store status"""
    started_at = getattr(request.app.state, "started_at", None)
    uptime = round(time.monotonic() - started_at, 2) if started_at else 0.0

    return api_response({
        "server": settings.server_name,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": store.info().model_dump(mode="json", by_alias=True),
        "uptime": uptime,
    })
