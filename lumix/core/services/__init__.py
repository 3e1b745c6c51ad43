"""Pure domain services: arithmetic, numbering, payroll, reporting and authorization."""

from lumix.core.services.authorization import (
    AuthorizationResult,
    Permission,
    authorize,
    require_permission,
)
from lumix.core.services.money import (
    InvoiceTotals,
    LineBreakdown,
    compute_line,
    compute_net,
    compute_totals,
    format_amount,
    validate_line_items,
)
from lumix.core.services.numbering import build_invoice_number
from lumix.core.services.payroll_aggregator import PayrollTotals, aggregate_payroll
from lumix.core.services.sales_report import build_sales_report

__all__ = [
    "AuthorizationResult",
    "Permission",
    "authorize",
    "require_permission",
    "InvoiceTotals",
    "LineBreakdown",
    "compute_line",
    "compute_net",
    "compute_totals",
    "format_amount",
    "validate_line_items",
    "build_invoice_number",
    "PayrollTotals",
    "aggregate_payroll",
    "build_sales_report",
]
