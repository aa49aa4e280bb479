"""
Excel upload endpoint
"""
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from vmix_server.api.deps import error_detail, get_settings, get_store, http_error
from vmix_server.config import Settings
from vmix_server.core.parser import parse, validate
from vmix_server.core.signature import ensure_signature
from vmix_server.core.store import RowStore
from vmix_server.core.workbook import workbook_metadata
from vmix_server.errors import ParseError, SecurityRejected, ValidationFailed, VmixError
from vmix_server.models import UploadResponse, api_response


router = APIRouter(prefix="/api/v1", tags=["upload"])
logger = logging.getLogger(__name__)


async def _read_upload(request: Request, settings: Settings) -> UploadFile:
    """Pull the single spreadsheet out of the multipart form"""
    form = await request.form()
    uploads = [
        item for item in form.getlist(settings.upload_field)
        if isinstance(item, UploadFile)
    ]

    if not uploads:
        other_files = [
            key for key, item in form.multi_items()
            if isinstance(item, UploadFile)
        ]
        if other_files:
            raise HTTPException(status_code=400, detail=error_detail(
                "Unexpected file field", "UNEXPECTED_FIELD",
                f'Use the "{settings.upload_field}" field for the upload',
            ))
        raise HTTPException(status_code=400, detail=error_detail(
            "No file provided", "NO_FILE_PROVIDED",
            "Select an Excel file to upload",
        ))

    if len(uploads) > 1:
        raise HTTPException(status_code=400, detail=error_detail(
            "Too many files", "TOO_MANY_FILES", "Only one file per upload",
        ))

    upload = uploads[0]
    extension = Path(upload.filename or "").suffix.lower()
    if (
        extension not in settings.allowed_extensions
        or upload.content_type not in settings.allowed_mime_types
    ):
        raise HTTPException(status_code=400, detail=error_detail(
            "File type not allowed", "INVALID_FILE_TYPE",
            f"Accepted types: {', '.join(settings.allowed_extensions)}",
        ))

    return upload


def _too_large(settings: Settings) -> HTTPException:
    limit_mb = settings.max_upload_bytes // (1024 * 1024)
    return HTTPException(status_code=400, detail=error_detail(
        "File too large", "FILE_TOO_LARGE", f"Maximum allowed size is {limit_mb} MB",
    ))


@router.post("/upload")
async def upload_excel(
    request: Request,
    store: RowStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Upload an Excel file and replace the stored rows

    Request: multipart/form-data with the file in the ``excel`` field

    Response:
        {
            "success": true,
            "data": {"filename", "rowCount", "columns", "fileSize", "mimeType", "metadata"},
            "message": "3 rows imported"
        }
    """
    upload = await _read_upload(request, settings)
    filename = upload.filename

    # The multipart parser spooled the part and counted its size
    if upload.size is not None and upload.size > settings.max_upload_bytes:
        raise _too_large(settings)

    data = await upload.read()

    if not data:
        raise HTTPException(status_code=400, detail=error_detail(
            "Empty file", "EMPTY_FILE", "The uploaded file is empty or corrupted",
        ))

    if len(data) > settings.max_upload_bytes:
        raise _too_large(settings)

    logger.info(f"📄 Processing Excel file: {filename} ({len(data)} bytes)")

    try:
        ensure_signature(data, settings.max_file_bytes)

        # Parsing is CPU-bound, keep it off the event loop
        rows = await run_in_threadpool(parse, data, filename)

        if not validate(rows):
            raise ValidationFailed("The Excel file contains no valid data or is empty")

    except (SecurityRejected, ParseError, ValidationFailed) as e:
        logger.warning(f"⚠️ Upload rejected for {filename}: [{e.code}] {e.message}")
        raise http_error(400, e) from e
    except Exception as e:
        logger.error(
            f"❌ ERROR importing {filename}\n"
            f"Error: {str(e)}\n"
            f"Error Type: {type(e).__name__}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=error_detail(
            "Error while importing the Excel file", "EXCEL_IMPORT_ERROR", str(e),
        )) from e

    # Optional, and read before the store is replaced
    try:
        metadata = await run_in_threadpool(workbook_metadata, data)
    except VmixError as e:
        logger.warning(f"⚠️ No workbook metadata for {filename}: {e.message}")
        metadata = None
    except Exception as e:
        logger.warning(
            f"⚠️ Could not read workbook metadata for {filename}: {type(e).__name__}: {e}",
            exc_info=True
        )
        metadata = None

    store.import_rows(rows, filename)

    response = UploadResponse(
        filename=filename,
        row_count=len(rows),
        columns=rows[0].keys(),
        file_size=len(data),
        mime_type=upload.content_type,
        metadata=metadata,
    )

    logger.info(f"✅ Successfully imported {len(rows)} rows from {filename}")

    return api_response(
        response.model_dump(mode="json", by_alias=True),
        message=f"{len(rows)} rows imported",
    )
