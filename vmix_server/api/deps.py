"""
Shared router dependencies and error helpers
"""
from typing import Dict, Optional

from fastapi import HTTPException, Request

from vmix_server.config import Settings
from vmix_server.core.store import RowStore
from vmix_server.errors import VmixError


def get_store(request: Request) -> RowStore:
    """Row store owned by the running application"""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def error_detail(error: str, code: str, message: Optional[str] = None) -> Dict:
    detail = {"success": False, "error": error, "code": code}
    if message:
        detail["message"] = message
    return detail


def http_error(status_code: int, exc: VmixError) -> HTTPException:
    """Translate a server error into an HTTPException carrying its code"""
    return HTTPException(
        status_code=status_code,
        detail=error_detail(exc.title, exc.code, exc.message),
    )
