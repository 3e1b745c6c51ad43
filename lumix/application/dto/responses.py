"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class CreateInvoiceResponse(BaseModel):
    """Outcome of a completed invoice dispatch."""

    invoice_id: int = Field(..., description="Created invoice ID")
    invoice_number: str = Field(..., description="Human-readable invoice number")
    status: str = Field(..., description="Invoice status")
    stage: str = Field(..., description="Last dispatch stage reached")
    total: float = Field(..., description="Invoice total")
    currency: str = Field(..., description="Currency code")
    email_id: str | None = Field(default=None, description="Email provider message ID")


class InvoiceSummaryResponse(BaseModel):
    """One invoice in a listing."""

    id: int = Field(..., description="Invoice ID")
    invoice_number: str = Field(..., description="Invoice number")
    client: str = Field(..., description="Client name")
    amount: float = Field(..., description="Invoice total")
    currency: str = Field(..., description="Currency code")
    status: str = Field(..., description="Invoice status")
    due_date: date | None = Field(default=None, description="Payment due date")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")


class InvoiceListResponse(BaseModel):
    """Invoice listing."""

    invoices: list[InvoiceSummaryResponse] = Field(default_factory=list)
    total: int = Field(..., description="Number of invoices returned")


class ProductSalesResponse(BaseModel):
    """Sales of one product."""

    name: str = Field(..., description="Product description as invoiced")
    units: float = Field(..., description="Units sold")
    revenue: float = Field(..., description="Sum of line totals")


class SalesReportResponse(BaseModel):
    """Best and worst sellers by revenue."""

    best_sellers: list[ProductSalesResponse] = Field(default_factory=list)
    worst_sellers: list[ProductSalesResponse] = Field(default_factory=list)
    average_unit_price: float = Field(..., description="Average unit price, weighted by units")


class PayrollRunResponse(BaseModel):
    """Payroll run header."""

    id: int = Field(..., description="Payroll run ID")
    run_date: date = Field(..., description="Pay date")
    frequency: str
    currency: str
    status: str
    total_gross: float
    total_tax: float
    total_deductions: float
    total_net: float
    created_at: datetime | None = None


class PayrollRunListResponse(BaseModel):
    """Latest payroll runs."""

    runs: list[PayrollRunResponse] = Field(default_factory=list)


class CreatePayrollRunResponse(BaseModel):
    """Created payroll run."""

    run_id: int = Field(..., description="Created payroll run ID")
    status: str = Field(..., description="Run status")
    total_gross: float
    total_tax: float
    total_deductions: float
    total_net: float


class PayrollSettingsResponse(BaseModel):
    """Company payroll settings."""

    payroll_frequency: str | None = None
    payroll_currency: str | None = None
    payroll_next_run_date: date | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INVOICE_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error

    Invoice dispatch failures also carry the failing ``stage`` and, once
    the invoice was persisted, its ``invoice_id``.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    stage: str | None = Field(default=None, description="Dispatch stage that failed")
    invoice_id: int | None = Field(default=None, description="Persisted invoice ID, if any")
    timestamp: datetime = Field(default_factory=datetime.now)
