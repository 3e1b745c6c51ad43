"""
Dependency injection container for FastAPI.

Provides the caller identity, role guards and use case instances to route
handlers. Identity is resolved upstream by the auth proxy and forwarded in
request headers.
"""

from collections.abc import Callable

from fastapi import Depends, Header

from lumix.application.use_cases import (
    CreateInvoiceUseCase,
    CreatePayrollRunUseCase,
    ExportInvoicesUseCase,
    ListInvoicesUseCase,
    ListPayrollRunsUseCase,
    PayrollSettingsUseCase,
    RenderInvoicePdfUseCase,
    RenderPayrollRunPdfUseCase,
    SalesReportUseCase,
)
from lumix.core.entities.company import Identity, Role
from lumix.core.exceptions import AuthenticationError, ValidationError
from lumix.core.services.authorization import Permission
from lumix.core.services.authorization import require_permission as check_permission


async def get_identity(
    x_user_id: str | None = Header(default=None),
    x_company_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    x_user_name: str | None = Header(default=None),
) -> Identity:
    """Build the caller identity from the auth proxy headers."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError()
    if not x_company_id or not x_company_id.strip():
        raise ValidationError("company_id", "Missing company profile.")
    try:
        role = Role((x_user_role or "").strip().lower())
    except ValueError:
        raise AuthenticationError("Unknown user role.") from None

    return Identity(
        user_id=x_user_id.strip(),
        company_id=x_company_id.strip(),
        role=role,
        full_name=x_user_name.strip() if x_user_name and x_user_name.strip() else None,
    )


def require_permission(permission: Permission) -> Callable:
    """Dependency factory rejecting identities whose role lacks *permission*."""

    async def _guard(identity: Identity = Depends(get_identity)) -> Identity:
        return check_permission(identity, permission)

    return _guard


# Use case dependencies
def get_create_invoice_use_case() -> CreateInvoiceUseCase:
    """Get create invoice use case."""
    return CreateInvoiceUseCase()


def get_list_invoices_use_case() -> ListInvoicesUseCase:
    """Get list invoices use case."""
    return ListInvoicesUseCase()


def get_sales_report_use_case() -> SalesReportUseCase:
    """Get sales report use case."""
    return SalesReportUseCase()


def get_export_invoices_use_case() -> ExportInvoicesUseCase:
    """Get export invoices use case."""
    return ExportInvoicesUseCase()


def get_render_invoice_pdf_use_case() -> RenderInvoicePdfUseCase:
    """Get single invoice PDF use case."""
    return RenderInvoicePdfUseCase()


def get_create_payroll_run_use_case() -> CreatePayrollRunUseCase:
    """Get create payroll run use case."""
    return CreatePayrollRunUseCase()


def get_list_payroll_runs_use_case() -> ListPayrollRunsUseCase:
    """Get list payroll runs use case."""
    return ListPayrollRunsUseCase()


def get_render_payroll_pdf_use_case() -> RenderPayrollRunPdfUseCase:
    """Get payroll run PDF use case."""
    return RenderPayrollRunPdfUseCase()


def get_payroll_settings_use_case() -> PayrollSettingsUseCase:
    """Get payroll settings use case."""
    return PayrollSettingsUseCase()
