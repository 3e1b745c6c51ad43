"""Invoice endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from lumix.api.dependencies import (
    get_create_invoice_use_case,
    get_export_invoices_use_case,
    get_identity,
    get_list_invoices_use_case,
    get_render_invoice_pdf_use_case,
    require_permission,
)
from lumix.application.dto.requests import CreateInvoiceRequest, ExportInvoicesRequest
from lumix.application.dto.responses import (
    CreateInvoiceResponse,
    ErrorResponse,
    InvoiceListResponse,
)
from lumix.application.use_cases import (
    CreateInvoiceUseCase,
    ExportInvoicesUseCase,
    ListInvoicesUseCase,
    RenderInvoicePdfUseCase,
)
from lumix.core.entities.company import Identity
from lumix.core.services.authorization import Permission

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _pdf_response(pdf_bytes: bytes, filename: str) -> Response:
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "",
    response_model=CreateInvoiceResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid invoice; nothing saved"},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse, "description": "Client not found"},
        500: {"model": ErrorResponse, "description": "Save or render failed"},
        502: {"model": ErrorResponse, "description": "Invoice saved, email failed"},
    },
)
async def create_invoice(
    request: CreateInvoiceRequest,
    identity: Identity = Depends(require_permission(Permission.CREATE_INVOICE)),
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
) -> CreateInvoiceResponse:
    """Create an invoice, render its PDF and email it to the client."""
    result = await use_case.execute(identity, request)
    return use_case.to_response(result)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    limit: int | None = None,
    identity: Identity = Depends(get_identity),
    use_case: ListInvoicesUseCase = Depends(get_list_invoices_use_case),
) -> InvoiceListResponse:
    """List invoices, newest first."""
    summaries = await use_case.execute(identity, limit=limit)
    return use_case.to_response(summaries)


@router.post(
    "/export",
    responses={
        200: {"content": {"application/pdf": {}}},
        403: {"model": ErrorResponse},
    },
)
async def export_invoices(
    request: ExportInvoicesRequest | None = None,
    identity: Identity = Depends(require_permission(Permission.EXPORT_INVOICES)),
    use_case: ExportInvoicesUseCase = Depends(get_export_invoices_use_case),
) -> Response:
    """Export all invoices, or the given IDs, as one PDF."""
    ids = request.ids if request else None
    result = await use_case.execute(identity, ids=ids)
    return _pdf_response(result.pdf_bytes, result.filename)


@router.get(
    "/{invoice_id}/pdf",
    responses={
        200: {"content": {"application/pdf": {}}},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
    },
)
async def get_invoice_pdf(
    invoice_id: int,
    identity: Identity = Depends(get_identity),
    use_case: RenderInvoicePdfUseCase = Depends(get_render_invoice_pdf_use_case),
) -> Response:
    """Generate and download a PDF for one invoice."""
    result = await use_case.execute(identity, invoice_id)
    return _pdf_response(result.pdf_bytes, result.filename)
