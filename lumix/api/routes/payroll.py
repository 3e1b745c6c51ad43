"""Payroll endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from lumix.api.dependencies import (
    get_create_payroll_run_use_case,
    get_identity,
    get_list_payroll_runs_use_case,
    get_payroll_settings_use_case,
    get_render_payroll_pdf_use_case,
    require_permission,
)
from lumix.application.dto.requests import CreatePayrollRunRequest, PayrollSettingsRequest
from lumix.application.dto.responses import (
    CreatePayrollRunResponse,
    ErrorResponse,
    PayrollRunListResponse,
    PayrollSettingsResponse,
)
from lumix.application.use_cases import (
    CreatePayrollRunUseCase,
    ListPayrollRunsUseCase,
    PayrollSettingsUseCase,
    RenderPayrollRunPdfUseCase,
)
from lumix.core.entities.company import Identity
from lumix.core.services.authorization import Permission

router = APIRouter(prefix="/api/payroll", tags=["payroll"])


@router.get("/runs", response_model=PayrollRunListResponse)
async def list_payroll_runs(
    identity: Identity = Depends(get_identity),
    use_case: ListPayrollRunsUseCase = Depends(get_list_payroll_runs_use_case),
) -> PayrollRunListResponse:
    """List the latest payroll runs."""
    runs = await use_case.execute(identity)
    return use_case.to_response(runs)


@router.post(
    "/runs",
    response_model=CreatePayrollRunResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
async def create_payroll_run(
    request: CreatePayrollRunRequest,
    identity: Identity = Depends(require_permission(Permission.CREATE_PAYROLL_RUN)),
    use_case: CreatePayrollRunUseCase = Depends(get_create_payroll_run_use_case),
) -> CreatePayrollRunResponse:
    """Create a draft payroll run."""
    run = await use_case.execute(identity, request)
    return use_case.to_response(run)


@router.get(
    "/runs/{run_id}/pdf",
    responses={
        200: {"content": {"application/pdf": {}}},
        404: {"model": ErrorResponse, "description": "Payroll run not found"},
    },
)
async def get_payroll_run_pdf(
    run_id: int,
    identity: Identity = Depends(get_identity),
    use_case: RenderPayrollRunPdfUseCase = Depends(get_render_payroll_pdf_use_case),
) -> Response:
    """Generate and download a PDF for a payroll run."""
    result = await use_case.execute(identity, run_id)
    return Response(
        content=result.pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.get("/settings", response_model=PayrollSettingsResponse)
async def get_payroll_settings(
    identity: Identity = Depends(get_identity),
    use_case: PayrollSettingsUseCase = Depends(get_payroll_settings_use_case),
) -> PayrollSettingsResponse:
    """Get company payroll settings."""
    company = await use_case.get(identity)
    return use_case.to_response(company)


@router.post(
    "/settings",
    response_model=PayrollSettingsResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
async def update_payroll_settings(
    request: PayrollSettingsRequest,
    identity: Identity = Depends(require_permission(Permission.UPDATE_PAYROLL_SETTINGS)),
    use_case: PayrollSettingsUseCase = Depends(get_payroll_settings_use_case),
) -> PayrollSettingsResponse:
    """Update company payroll settings."""
    company = await use_case.update(identity, request)
    return use_case.to_response(company)
