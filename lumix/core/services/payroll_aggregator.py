"""
Payroll run aggregation.

Turns per-employee gross/tax/deduction entries into net amounts and run
totals. Mapping hours worked to a gross figure is the caller's job.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from lumix.config import get_logger
from lumix.core.entities.payroll import PayrollRunItem
from lumix.core.exceptions import InvalidPayrollItemsError, ValidationError
from lumix.core.services.money import compute_net

logger = get_logger(__name__)


@dataclass(frozen=True)
class PayrollTotals:
    """Items with net filled in, plus their plain sums."""

    items: list[PayrollRunItem]
    total_gross: float
    total_tax: float
    total_deductions: float
    total_net: float


def validate_payroll_items(items: Sequence[PayrollRunItem]) -> None:
    """Reject the whole batch if it is empty or any item is invalid."""
    if not items:
        raise ValidationError("items", "Payroll run must include at least one employee.")

    problems: dict[int, str] = {}
    for index, item in enumerate(items):
        if not item.employee_id or not item.employee_id.strip():
            problems[index] = "employee is required"
        elif not math.isfinite(item.gross):
            problems[index] = "gross must be a finite number"
        elif not (math.isfinite(item.tax) and math.isfinite(item.deductions)):
            problems[index] = "tax and deductions must be finite numbers"

    if problems:
        raise InvalidPayrollItemsError(problems)


def aggregate_payroll(items: Sequence[PayrollRunItem]) -> PayrollTotals:
    """Compute net per item and sum the run totals."""
    validate_payroll_items(items)

    computed: list[PayrollRunItem] = []
    for item in items:
        net = compute_net(item.gross, item.tax, item.deductions)
        if net < 0:
            # Allowed (e.g. clawbacks); surfaced for review rather than clamped
            logger.warning(
                "payroll_item_negative_net",
                employee_id=item.employee_id,
                gross=item.gross,
                net=net,
            )
        computed.append(item.model_copy(update={"net": net}))

    return PayrollTotals(
        items=computed,
        total_gross=sum(i.gross for i in computed),
        total_tax=sum(i.tax for i in computed),
        total_deductions=sum(i.deductions for i in computed),
        total_net=sum(i.net for i in computed),
    )
