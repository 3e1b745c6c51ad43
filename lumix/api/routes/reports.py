"""Report endpoints."""

from fastapi import APIRouter, Depends, Query

from lumix.api.dependencies import get_identity, get_sales_report_use_case
from lumix.application.dto.responses import SalesReportResponse
from lumix.application.use_cases import SalesReportUseCase
from lumix.core.entities.company import Identity

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/sales", response_model=SalesReportResponse)
async def get_sales_report(
    size: int = Query(default=5, ge=1, le=50, description="Products per ranking"),
    identity: Identity = Depends(get_identity),
    use_case: SalesReportUseCase = Depends(get_sales_report_use_case),
) -> SalesReportResponse:
    """Best and worst sellers by revenue, with the average unit price."""
    report = await use_case.execute(identity, size=size)
    return use_case.to_response(report)
