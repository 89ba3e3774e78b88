# backend/folio_engine/routers/ledger.py
"""
Ledger export/import endpoints.

- POST /ledger/export - Transactions -> downloadable JSON export file
- POST /ledger/import - Export file upload -> preview of valid/invalid rows

Import never commits anything (there is no storage here); the preview
lets the caller decide what to keep.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response

from folio_engine.dependencies import get_ledger_service
from folio_engine.middleware.rate_limit import RATE_LIMIT_LEDGER, limiter
from folio_engine.schemas.ledger import (
    ImportPreviewResponse,
    ImportRowResponse,
    LedgerExportRequest,
)
from folio_engine.services.ledger import ImportPreview, ImportRow, LedgerService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/ledger",
    tags=["Ledger"],
)


# =============================================================================
# MAPPER FUNCTIONS
# =============================================================================

def _map_row(row: ImportRow) -> ImportRowResponse:
    return ImportRowResponse(
        row_number=row.row_number,
        asset_id=row.asset_id,
        transaction_type=row.transaction_type.value if row.transaction_type else None,
        quantity=row.quantity,
        unit_price=row.unit_price,
        timestamp=row.timestamp,
        notes=row.notes,
        transaction_id=row.transaction_id,
        errors=list(row.errors),
    )


def _map_preview(preview: ImportPreview) -> ImportPreviewResponse:
    return ImportPreviewResponse(
        file_version=preview.file_version,
        total_row_count=preview.total_row_count,
        has_valid_data=preview.has_valid_data,
        valid_rows=[_map_row(r) for r in preview.valid_rows],
        invalid_rows=[_map_row(r) for r in preview.invalid_rows],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/export",
    summary="Export ledger",
    response_class=Response,
    responses={200: {"content": {"application/json": {}}}},
)
@limiter.limit(RATE_LIMIT_LEDGER)
def export_ledger(
        request: Request,
        body: LedgerExportRequest,
        service: LedgerService = Depends(get_ledger_service),
) -> Response:
    """
    Serialize transactions to a versioned export file.

    Quantities and prices are written as plain decimal strings. The
    response carries a `Content-Disposition` header with the file name
    `folio-ledger-YYYY-MM-DD.json`.
    """
    now = datetime.now(timezone.utc)
    payload = service.export_transactions(
        [txn.to_domain() for txn in body.transactions],
        exported_at=now,
    )
    filename = service.export_filename(now.date())

    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/import",
    response_model=ImportPreviewResponse,
    summary="Preview ledger import",
    response_description="Valid and invalid rows of the uploaded export file",
)
@limiter.limit(RATE_LIMIT_LEDGER)
async def import_ledger(
        request: Request,
        file: UploadFile = File(..., description="Ledger export file (JSON)"),
        service: LedgerService = Depends(get_ledger_service),
) -> ImportPreviewResponse:
    """
    Parse an export file into a preview.

    Each row is validated on its own; invalid rows carry messages such as
    `Invalid number 'abc' for quantity`.

    Raises **400** for an empty file, a file that is not an export file,
    or an unsupported format version.
    """
    content = await file.read()
    logger.info(f"Ledger import: {file.filename} ({len(content)} bytes)")

    preview = service.parse_export(content)
    return _map_preview(preview)
