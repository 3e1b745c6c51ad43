"""
Money arithmetic for invoice lines and payroll items.

All computation runs at full float precision. Amounts are rounded only when
formatted for presentation. The invoice total is derived from the summed
subtotal, discount and tax, so it matches them exactly and matches the sum of
line totals up to float error.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from lumix.core.entities.invoice import LineItem
from lumix.core.exceptions import InvalidLineItemsError, ValidationError

# Absolute tolerance for total == subtotal - discount_total + tax_total
TOTALS_TOLERANCE = 1e-9

CURRENCY_SYMBOLS: dict[str, str] = {
    "EUR": "€",
    "USD": "$",
}


@dataclass(frozen=True)
class LineBreakdown:
    """Derived values of one line item."""

    line_subtotal: float
    discount: float
    taxable: float
    tax: float
    line_total: float


@dataclass(frozen=True)
class InvoiceTotals:
    """Per-line breakdowns and aggregate totals of an invoice."""

    lines: list[LineBreakdown] = field(default_factory=list)
    subtotal: float = 0.0
    discount_total: float = 0.0
    tax_total: float = 0.0
    total: float = 0.0


def _is_finite(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_line_items(items: Sequence[LineItem]) -> None:
    """
    Check preconditions for every line item.

    Raises:
        ValidationError: If the batch is empty.
        InvalidLineItemsError: Listing every invalid item; nothing is accepted.
    """
    if not items:
        raise ValidationError("items", "Invoice must include at least one line item.")

    problems: dict[int, str] = {}
    for index, item in enumerate(items):
        if not item.description or not item.description.strip():
            problems[index] = "description is required"
        elif not _is_finite(item.quantity) or item.quantity <= 0:
            problems[index] = "quantity must be greater than 0"
        elif not _is_finite(item.unit_price) or item.unit_price < 0:
            problems[index] = "unit price must be a finite number >= 0"
        elif not _is_finite(item.tax_rate) or not _is_finite(item.discount_rate):
            problems[index] = "tax and discount rates must be finite numbers"

    if problems:
        raise InvalidLineItemsError(problems)


def compute_line(item: LineItem) -> LineBreakdown:
    """Compute subtotal, discount, tax and total of one line."""
    line_subtotal = item.quantity * item.unit_price
    discount = line_subtotal * (item.discount_rate / 100)
    taxable = line_subtotal - discount
    tax = taxable * (item.tax_rate / 100)
    return LineBreakdown(
        line_subtotal=line_subtotal,
        discount=discount,
        taxable=taxable,
        tax=tax,
        line_total=taxable + tax,
    )


def compute_totals(items: Sequence[LineItem]) -> InvoiceTotals:
    """
    Validate a batch of line items and aggregate their totals.

    Raises:
        ValidationError: On invalid items, or a total that is not a finite
            positive amount.
    """
    validate_line_items(items)

    lines = [compute_line(item) for item in items]
    subtotal = sum(line.line_subtotal for line in lines)
    discount_total = sum(line.discount for line in lines)
    tax_total = sum(line.tax for line in lines)
    totals = InvoiceTotals(
        lines=lines,
        subtotal=subtotal,
        discount_total=discount_total,
        tax_total=tax_total,
        total=subtotal - discount_total + tax_total,
    )

    if not math.isfinite(totals.total):
        raise ValidationError("total", "invoice total is out of range", totals.total)
    if totals.total <= 0:
        raise ValidationError("total", "invoice total must be positive", totals.total)

    return totals


def compute_net(gross: float, tax: float, deductions: float) -> float:
    """Net pay. Not floored at zero."""
    return gross - tax - deductions


def currency_symbol(currency: str | None) -> str:
    return CURRENCY_SYMBOLS.get((currency or "").upper(), "")


def format_amount(amount: float | None, currency: str | None = None) -> str:
    """Format an amount with its currency symbol and two decimals."""
    symbol = currency_symbol(currency)
    if amount is None or not _is_finite(amount):
        return f"{symbol}0.00"
    return f"{symbol}{amount:.2f}"
