"""Request DTOs for API endpoints.

Pydantic v2 models for request validation. Business rules (positive
quantities, non-empty batches, finite amounts) are enforced by the use
cases so every caller gets the same errors.
"""

from datetime import date

from pydantic import BaseModel, Field


class LineItemRequest(BaseModel):
    """One line of a new invoice."""

    description: str = Field(default="", description="Item description")
    quantity: float = Field(..., description="Quantity, must be greater than 0")
    unit_price: float = Field(..., description="Price per unit, must be >= 0")
    tax_rate: float = Field(default=0.0, description="Tax rate in percent")
    discount_rate: float = Field(default=0.0, description="Discount rate in percent")


class CreateInvoiceRequest(BaseModel):
    """Request to create, render and send an invoice.

    The client is referenced either by ``client_id`` or by free-text
    ``client_name`` plus ``client_email``.
    """

    client_id: int | None = Field(default=None, description="Existing client ID")
    client_name: str | None = Field(default=None, description="Client name (free text)")
    client_email: str | None = Field(default=None, description="Recipient email address")
    currency: str | None = Field(
        default=None,
        max_length=3,
        description="ISO currency code; defaults to the configured currency",
    )
    items: list[LineItemRequest] = Field(default_factory=list, description="Line items")
    due_date: date | None = Field(default=None, description="Payment due date")
    notes: str | None = Field(default=None, max_length=2000, description="Free-text notes")


class ExportInvoicesRequest(BaseModel):
    """Request to export invoices as a single PDF."""

    ids: list[int] | None = Field(
        default=None,
        description="Invoice IDs to export; all invoices when omitted",
    )


class PayrollItemRequest(BaseModel):
    """One employee entry of a payroll run."""

    employee_id: str = Field(default="", description="Employee ID")
    gross: float = Field(..., description="Gross pay")
    tax: float = Field(default=0.0, description="Tax withheld")
    deductions: float = Field(default=0.0, description="Other deductions")


class CreatePayrollRunRequest(BaseModel):
    """Request to create a draft payroll run."""

    run_date: date = Field(..., description="Pay date of the run")
    frequency: str = Field(..., min_length=1, description="Pay frequency, e.g. monthly")
    currency: str = Field(..., min_length=1, max_length=3, description="ISO currency code")
    items: list[PayrollItemRequest] = Field(default_factory=list, description="Employee entries")


class PayrollSettingsRequest(BaseModel):
    """Request to update company payroll settings."""

    payroll_frequency: str = Field(..., min_length=1, description="monthly, bi-weekly or flexible")
    payroll_currency: str = Field(..., min_length=1, max_length=3, description="ISO currency code")
    payroll_next_run_date: date | None = Field(default=None, description="Next pay run date")
