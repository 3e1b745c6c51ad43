"""
Sales report over stored invoice lines.

Lines are grouped by description. Products are ranked by revenue; ties keep
the order in which products were first sold.
"""

import math
from collections.abc import Sequence

from lumix.core.entities.report import ProductSales, SalesReport, SoldItem

UNNAMED_PRODUCT = "Unnamed"
DEFAULT_REPORT_SIZE = 5


def _amount(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def build_sales_report(
    items: Sequence[SoldItem],
    size: int = DEFAULT_REPORT_SIZE,
) -> SalesReport:
    """
    Aggregate invoice lines into best sellers, worst sellers and average price.

    Non-finite amounts count as zero. The worst sellers are the lowest
    ``size`` products by revenue, lowest first; with few products they
    overlap the best sellers.
    """
    products: dict[str, ProductSales] = {}
    priced_units = 0.0
    unit_count = 0.0

    for item in items:
        name = item.description.strip() or UNNAMED_PRODUCT
        units = _amount(item.quantity)
        product = products.setdefault(name, ProductSales(name=name))
        product.units += units
        product.revenue += _amount(item.line_total)
        priced_units += _amount(item.unit_price) * units
        unit_count += units

    ranked = sorted(products.values(), key=lambda p: p.revenue, reverse=True)
    return SalesReport(
        best_sellers=ranked[:size],
        worst_sellers=list(reversed(ranked[-size:])) if size > 0 else [],
        average_unit_price=priced_units / unit_count if unit_count > 0 else 0.0,
    )
