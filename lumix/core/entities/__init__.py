"""Domain entities."""

from lumix.core.entities.company import Client, Company, Identity, Role
from lumix.core.entities.invoice import (
    ExportBatch,
    Invoice,
    InvoiceStatus,
    InvoiceSummary,
    LineItem,
)
from lumix.core.entities.payroll import PayrollRun, PayrollRunItem, PayrollRunStatus
from lumix.core.entities.report import ProductSales, SalesReport, SoldItem

__all__ = [
    # Company
    "Client",
    "Company",
    "Identity",
    "Role",
    # Invoice
    "ExportBatch",
    "Invoice",
    "InvoiceStatus",
    "InvoiceSummary",
    "LineItem",
    # Payroll
    "PayrollRun",
    "PayrollRunItem",
    "PayrollRunStatus",
    # Reports
    "ProductSales",
    "SalesReport",
    "SoldItem",
]
