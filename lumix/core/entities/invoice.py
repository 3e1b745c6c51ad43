"""Invoice domain entities."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class InvoiceStatus(str, Enum):
    """Invoice status. Only PENDING is assigned here; transitions happen elsewhere."""

    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"


class LineItem(BaseModel):
    """A single billable row on an invoice."""

    id: int | None = None
    invoice_id: int | None = None
    description: str
    quantity: float
    unit_price: float
    tax_rate: float = 0.0  # percent
    discount_rate: float = 0.0  # percent
    line_total: float = 0.0  # filled from the computed breakdown


class Invoice(BaseModel):
    """An issued invoice with its computed totals."""

    id: int | None = None
    company_id: str
    invoice_number: str
    client_id: int | None = None
    client_name: str
    client_email: str | None = None
    currency: str = "EUR"
    items: list[LineItem] = Field(default_factory=list)
    due_date: date | None = None
    notes: str | None = None
    subtotal: float = 0.0
    discount_total: float = 0.0
    tax_total: float = 0.0
    total: float = 0.0
    status: InvoiceStatus = InvoiceStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)

    def summary(self) -> "InvoiceSummary":
        return InvoiceSummary(
            id=self.id,
            invoice_number=self.invoice_number,
            client=self.client_name,
            amount=self.total,
            currency=self.currency,
            status=self.status,
            due_date=self.due_date,
            created_at=self.created_at,
        )


class InvoiceSummary(BaseModel):
    """One row of an invoice listing or export."""

    id: int | None = None
    invoice_number: str
    client: str
    amount: float
    currency: str = "EUR"
    status: InvoiceStatus = InvoiceStatus.PENDING
    due_date: date | None = None
    created_at: datetime | None = None


class ExportBatch(BaseModel):
    """An ad hoc, unpersisted set of invoices assembled for PDF rendering."""

    company_name: str
    generated_at: datetime = Field(default_factory=_utcnow)
    invoices: list[InvoiceSummary] = Field(default_factory=list)
