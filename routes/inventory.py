"""
Inventory import/export API routes.

Import endpoints always answer with a full reconciliation summary or an
error body; a failing row never turns into an HTTP error.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool
import structlog

from integrations.directory import CommerceDirectoryClient
from models.inventory import (
    ImportResponse,
    ImportRowsRequest,
    ReconciliationSummary,
    ReportRequest,
)
from models.location import LocationMode
from parsers.excel_parser import XLSX_MEDIA_TYPE, encode_spreadsheet
from routes.dependencies import get_directory_client, handle_error
from services.export_service import EXPORT_FILENAME, ExportService
from services.import_service import ImportService, ReconciliationResult

logger = structlog.get_logger(__name__)

router = APIRouter()


def _import_response(result: ReconciliationResult) -> ImportResponse:
    return ImportResponse(
        success=True,
        results=ReconciliationSummary(**result.to_dict()),
    )


def _xlsx_response(content, filename: str) -> StreamingResponse:
    return StreamingResponse(
        content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ===================
# IMPORT
# ===================

@router.post("/import", response_model=ImportResponse)
async def import_inventory(
    file: UploadFile = File(...),
    location_id: str = Form(...),
    directory: CommerceDirectoryClient = Depends(get_directory_client),
):
    """
    Import inventory quantities from an Excel file.

    Reads the first sheet (SKU, Quantity Available, Inventory Location) and
    sets each row's quantity at its location when it differs from the store.

    Raises:
        422: Unreadable file or no location selected
        404: Selected location doesn't exist
        503: Shopify unavailable
    """
    logger.info(
        "inventory_import_started",
        filename=file.filename,
        content_type=file.content_type,
        location_id=location_id,
    )

    try:
        mode = LocationMode.parse(location_id)
        content = await file.read()

        service = ImportService(directory)
        result = await run_in_threadpool(service.reconcile_import, content, mode)

        return _import_response(result)

    except Exception as e:
        logger.error("inventory_import_failed", filename=file.filename, error=str(e))
        return handle_error(e)


@router.post("/import/rows", response_model=ImportResponse)
def import_inventory_rows(
    request: ImportRowsRequest,
    directory: CommerceDirectoryClient = Depends(get_directory_client),
):
    """
    Import rows that were already parsed client-side.
    """
    try:
        mode = LocationMode.parse(request.location_id)
        result = ImportService(directory).reconcile_rows(request.rows, mode)
        return _import_response(result)

    except Exception as e:
        logger.error("inventory_import_rows_failed", error=str(e))
        return handle_error(e)


@router.post("/import/report")
def download_import_report(request: ReportRequest):
    """
    Download failed or skipped rows (with their reason column) as Excel.
    """
    try:
        content = encode_spreadsheet(request.rows, sheet_title="Report")
        return _xlsx_response(content, request.filename)

    except Exception as e:
        return handle_error(e)


# ===================
# EXPORT
# ===================

@router.get("/export")
def export_inventory(
    location_id: Optional[str] = Query(None, description="Location GID or ALL_LOCATIONS"),
    directory: CommerceDirectoryClient = Depends(get_directory_client),
):
    """
    Export product inventory as Excel, one row per variant and location.
    """
    try:
        content = ExportService(directory).export_inventory(location_id)
        return _xlsx_response(content, EXPORT_FILENAME)

    except Exception as e:
        logger.error("inventory_export_failed", location_id=location_id, error=str(e))
        return handle_error(e)
