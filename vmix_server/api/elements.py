"""
Row listing, selection and reset endpoints
"""
import logging

from fastapi import APIRouter, Depends

from vmix_server.api.deps import get_store, http_error
from vmix_server.core.store import RowStore
from vmix_server.errors import NoSelection, NotFound
from vmix_server.models import api_response


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["elements"])


@router.get("/elements")
async def list_elements(store: RowStore = Depends(get_store)):
    """All imported rows plus store info"""
    elements = [row.to_dict() for row in store.list_rows()]
    info = store.info()
    return api_response({
        "elements": elements,
        "info": info.model_dump(mode="json", by_alias=True),
    })


@router.put("/element/select/{row_id}")
async def select_element(row_id: str, store: RowStore = Depends(get_store)):
    """
    Mark a row as the active one

    Response (404): {"success": false, "code": "ELEMENT_NOT_FOUND", ...}
    """
    try:
        row = store.select(row_id)
    except NotFound as e:
        logger.warning(f"⚠️ Select failed, unknown id: {row_id}")
        raise http_error(404, e) from e

    return api_response(row.to_dict(), message="Element selected")


@router.get("/element/selected")
async def get_selected_element(store: RowStore = Depends(get_store)):
    """Currently selected row, polled by vMix as a data source"""
    try:
        row = store.get_selected()
    except NoSelection as e:
        raise http_error(404, e) from e

    return api_response(row.to_dict())


@router.delete("/reset")
async def reset_store(store: RowStore = Depends(get_store)):
    """Drop all rows and the selection"""
    logger.info("🗑️ Resetting store...")
    store.reset()
    return api_response(message="Store reset")
