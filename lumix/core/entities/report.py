"""Sales report entities."""

from pydantic import BaseModel, Field


class SoldItem(BaseModel):
    """One stored invoice line, as read for reporting."""

    description: str
    quantity: float
    unit_price: float
    line_total: float


class ProductSales(BaseModel):
    """Units and revenue of one product across all invoices."""

    name: str
    units: float = 0.0
    revenue: float = 0.0


class SalesReport(BaseModel):
    """Best and worst sellers by revenue, plus the unit-weighted average price."""

    best_sellers: list[ProductSales] = Field(default_factory=list)
    worst_sellers: list[ProductSales] = Field(default_factory=list)
    average_unit_price: float = 0.0
