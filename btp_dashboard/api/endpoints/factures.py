"""Facture list and export REST endpoints."""
from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, Depends, Response

from btp_dashboard.api.dependencies import get_facture_filters, get_invoice_list_controller
from btp_dashboard.api.errors import map_service_error
from btp_dashboard.export.spreadsheet import ExportArtifact
from btp_dashboard.schemas.facture import (
    ExportRequest,
    FactureFilterParams,
    FactureListResponse,
    ImportConfirmation,
    ImportConfirmationRequest,
)
from btp_dashboard.services.exceptions import ServiceError, UpdateError
from btp_dashboard.services.invoice_list import InvoiceListController

router = APIRouter(prefix="/factures", tags=["factures"])

IMPORT_STATUS_HEADER = "X-Import-Status"
PENDING_IDS_HEADER = "X-Pending-Ids"


def _artifact_response(
    artifact: ExportArtifact,
    import_status: str,
    pending_ids: Sequence[int] = (),
) -> Response:
    headers = {
        "Content-Disposition": f'attachment; filename="{artifact.filename}"',
        IMPORT_STATUS_HEADER: import_status,
    }
    if pending_ids:
        headers[PENDING_IDS_HEADER] = ",".join(str(facture_id) for facture_id in pending_ids)
    return Response(content=artifact.content, media_type=artifact.media_type, headers=headers)


@router.get("", response_model=FactureListResponse)
async def list_factures(
    filters: FactureFilterParams = Depends(get_facture_filters),
    controller: InvoiceListController = Depends(get_invoice_list_controller),
) -> FactureListResponse:
    """List the caller's factures, newest first."""

    await controller.apply_filters(filters)
    return FactureListResponse(items=controller.records, total=len(controller.records))


@router.post("/export")
async def export_factures(
    payload: ExportRequest,
    controller: InvoiceListController = Depends(get_invoice_list_controller),
) -> Response:
    """Export the selected factures as xlsx and flag them as imported.

    When the status update fails the file is still returned, with
    ``X-Import-Status: failed`` and the ids to confirm in ``X-Pending-Ids``.
    """

    try:
        await controller.apply_filters(payload.filters)
        controller.select(payload.ids)
        result = await controller.export_selected()
    except UpdateError as exc:
        if exc.artifact is None:
            raise map_service_error(exc) from exc
        return _artifact_response(exc.artifact, "failed", exc.pending_ids)
    except ServiceError as exc:
        raise map_service_error(exc) from exc

    return _artifact_response(result.artifact, "confirmed")


@router.post("/confirm-import", response_model=ImportConfirmation)
async def confirm_import(
    payload: ImportConfirmationRequest,
    controller: InvoiceListController = Depends(get_invoice_list_controller),
) -> ImportConfirmation:
    """Flag factures as imported without exporting them again."""

    try:
        updated = await controller.confirm_import(payload.ids)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ImportConfirmation(updated=updated)
