"""
List Invoices Use Case.
"""

from lumix.application.dto.responses import InvoiceListResponse, InvoiceSummaryResponse
from lumix.core.entities.company import Identity
from lumix.core.entities.invoice import InvoiceSummary
from lumix.core.interfaces.invoice_store import IInvoiceStore
from lumix.core.services.authorization import Permission, require_permission


class ListInvoicesUseCase:
    """List a company's invoices, newest first."""

    def __init__(self, invoice_store: IInvoiceStore | None = None):
        self._invoice_store = invoice_store

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from lumix.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def execute(self, identity: Identity, limit: int | None = None) -> list[InvoiceSummary]:
        require_permission(identity, Permission.VIEW_RECORDS)
        store = await self._get_invoice_store()
        return await store.list_summaries(identity.company_id, limit=limit)

    @staticmethod
    def to_response(summaries: list[InvoiceSummary]) -> InvoiceListResponse:
        return InvoiceListResponse(
            invoices=[
                InvoiceSummaryResponse(
                    id=s.id,
                    invoice_number=s.invoice_number,
                    client=s.client,
                    amount=s.amount,
                    currency=s.currency,
                    status=s.status.value,
                    due_date=s.due_date,
                    created_at=s.created_at,
                )
                for s in summaries
            ],
            total=len(summaries),
        )
