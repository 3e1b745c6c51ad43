"""Abstract interface for invoice storage."""

from abc import ABC, abstractmethod

from lumix.core.entities.invoice import Invoice, InvoiceSummary
from lumix.core.entities.report import SoldItem


class IInvoiceStore(ABC):
    """Interface for invoice persistence, always scoped by company."""

    @abstractmethod
    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """
        Persist an invoice header and its line items atomically.

        Raises:
            DuplicateInvoiceNumberError: If the number is taken in this company.
            PersistenceError: On any other write failure.
        """
        pass

    @abstractmethod
    async def get_invoice(self, company_id: str, invoice_id: int) -> Invoice | None:
        """Get invoice by ID with items."""
        pass

    @abstractmethod
    async def list_summaries(
        self,
        company_id: str,
        ids: list[int] | None = None,
        limit: int | None = None,
    ) -> list[InvoiceSummary]:
        """List invoice summaries, newest first, optionally filtered by ID."""
        pass

    @abstractmethod
    async def list_sold_items(self, company_id: str) -> list[SoldItem]:
        """All line items of the company's invoices, in the order they were saved."""
        pass
