"""
Sales Report Use Case.
"""

from lumix.application.dto.responses import ProductSalesResponse, SalesReportResponse
from lumix.config import get_logger
from lumix.core.entities.company import Identity
from lumix.core.entities.report import SalesReport
from lumix.core.interfaces.invoice_store import IInvoiceStore
from lumix.core.services.authorization import Permission, require_permission
from lumix.core.services.sales_report import DEFAULT_REPORT_SIZE, build_sales_report

logger = get_logger(__name__)


class SalesReportUseCase:
    """Rank a company's products by invoiced revenue."""

    def __init__(self, invoice_store: IInvoiceStore | None = None):
        self._invoice_store = invoice_store

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from lumix.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def execute(self, identity: Identity, size: int = DEFAULT_REPORT_SIZE) -> SalesReport:
        require_permission(identity, Permission.VIEW_RECORDS)
        store = await self._get_invoice_store()
        items = await store.list_sold_items(identity.company_id)
        report = build_sales_report(items, size=size)
        logger.info(
            "sales_report_built",
            company_id=identity.company_id,
            lines=len(items),
        )
        return report

    @staticmethod
    def to_response(report: SalesReport) -> SalesReportResponse:
        return SalesReportResponse(
            best_sellers=[ProductSalesResponse(**p.model_dump()) for p in report.best_sellers],
            worst_sellers=[ProductSalesResponse(**p.model_dump()) for p in report.worst_sellers],
            average_unit_price=report.average_unit_price,
        )
