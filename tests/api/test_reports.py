"""API tests for report endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from lumix.api.dependencies import get_sales_report_use_case
from lumix.api.main import app
from lumix.application.use_cases import SalesReportUseCase
from lumix.core.entities.report import SoldItem


@pytest.fixture
def mock_invoice_store():
    store = AsyncMock()
    store.list_sold_items = AsyncMock(
        return_value=[
            SoldItem(description=f"Product {i}", quantity=1, unit_price=i * 10, line_total=i * 10)
            for i in range(1, 8)
        ]
    )
    return store


@pytest.fixture
async def reports_client(mock_invoice_store):
    app.dependency_overrides[get_sales_report_use_case] = lambda: SalesReportUseCase(
        mock_invoice_store
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_sales_report_use_case, None)


class TestSalesReportEndpoint:
    async def test_sales_report(self, reports_client, viewer_headers):
        response = await reports_client.get("/api/reports/sales", headers=viewer_headers)

        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["best_sellers"]] == [
            "Product 7",
            "Product 6",
            "Product 5",
            "Product 4",
            "Product 3",
        ]
        assert data["worst_sellers"][0] == {"name": "Product 1", "units": 1, "revenue": 10}
        assert data["average_unit_price"] == pytest.approx(40)

    async def test_size_parameter(self, reports_client, viewer_headers):
        response = await reports_client.get("/api/reports/sales?size=2", headers=viewer_headers)

        data = response.json()
        assert len(data["best_sellers"]) == 2
        assert len(data["worst_sellers"]) == 2

    async def test_invalid_size(self, reports_client, viewer_headers):
        response = await reports_client.get("/api/reports/sales?size=0", headers=viewer_headers)
        assert response.status_code == 422

    async def test_unauthenticated(self, reports_client, mock_invoice_store):
        response = await reports_client.get("/api/reports/sales")

        assert response.status_code == 401
        mock_invoice_store.list_sold_items.assert_not_awaited()
