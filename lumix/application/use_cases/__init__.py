"""Application use cases."""

from lumix.application.use_cases.create_invoice import (
    CreateInvoiceResult,
    CreateInvoiceUseCase,
    DispatchStage,
    build_invoice_email,
)
from lumix.application.use_cases.create_payroll_run import CreatePayrollRunUseCase
from lumix.application.use_cases.documents import (
    DocumentResult,
    ExportInvoicesUseCase,
    RenderInvoicePdfUseCase,
    RenderPayrollRunPdfUseCase,
)
from lumix.application.use_cases.list_invoices import ListInvoicesUseCase
from lumix.application.use_cases.payroll_settings import (
    ListPayrollRunsUseCase,
    PayrollSettingsUseCase,
)
from lumix.application.use_cases.sales_report import SalesReportUseCase

__all__ = [
    "CreateInvoiceUseCase",
    "CreateInvoiceResult",
    "DispatchStage",
    "build_invoice_email",
    "CreatePayrollRunUseCase",
    "DocumentResult",
    "ExportInvoicesUseCase",
    "RenderInvoicePdfUseCase",
    "RenderPayrollRunPdfUseCase",
    "ListInvoicesUseCase",
    "ListPayrollRunsUseCase",
    "PayrollSettingsUseCase",
    "SalesReportUseCase",
]
