"""Payroll run domain entities."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class PayrollRunStatus(str, Enum):
    """Payroll run status values."""

    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"


class PayrollRunItem(BaseModel):
    """Gross, tax and deductions for one employee in a run."""

    id: int | None = None
    payroll_run_id: int | None = None
    employee_id: str
    gross: float
    tax: float = 0.0
    deductions: float = 0.0
    net: float = 0.0  # gross - tax - deductions, no floor


class PayrollRun(BaseModel):
    """One payroll batch covering multiple employees for a pay period."""

    id: int | None = None
    company_id: str
    run_date: date
    frequency: str
    currency: str
    status: PayrollRunStatus = PayrollRunStatus.DRAFT
    items: list[PayrollRunItem] = Field(default_factory=list)
    total_gross: float = 0.0
    total_tax: float = 0.0
    total_deductions: float = 0.0
    total_net: float = 0.0
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC).replace(tzinfo=None)
    )
