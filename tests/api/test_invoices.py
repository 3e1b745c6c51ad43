"""API tests for invoice endpoints."""

import random
from unittest.mock import AsyncMock, MagicMock

import aiosqlite
import pytest
from httpx import ASGITransport, AsyncClient

from lumix.api.dependencies import (
    get_create_invoice_use_case,
    get_export_invoices_use_case,
    get_list_invoices_use_case,
)
from lumix.api.main import app
from lumix.application.use_cases import (
    CreateInvoiceUseCase,
    DocumentResult,
    ListInvoicesUseCase,
)
from lumix.config.settings import Settings
from lumix.core.entities.company import Company
from lumix.core.entities.invoice import Invoice, InvoiceSummary
from lumix.core.exceptions import DeliveryError, RenderError
from lumix.core.interfaces.email import EmailReceipt


def _assign_id(invoice: Invoice) -> Invoice:
    invoice.id = 42
    return invoice


@pytest.fixture
def invoice_body() -> dict:
    return {
        "client_name": "Globex",
        "client_email": "billing@globex.test",
        "currency": "EUR",
        "items": [
            {
                "description": "Consulting",
                "quantity": 2,
                "unit_price": 100,
                "tax_rate": 10,
                "discount_rate": 5,
            }
        ],
        "due_date": "2026-02-15",
    }


@pytest.fixture
def mock_invoice_store():
    store = AsyncMock()
    store.create_invoice = AsyncMock(side_effect=_assign_id)
    store.list_summaries = AsyncMock(
        return_value=[
            InvoiceSummary(id=42, invoice_number="INV-20260115-4821", client="Globex", amount=209)
        ]
    )
    return store


@pytest.fixture
def mock_email_sender():
    sender = AsyncMock()
    sender.send = AsyncMock(return_value=EmailReceipt(message_id="email-1", status_code=200))
    return sender


@pytest.fixture
def mock_company_store():
    store = AsyncMock()
    store.get_company = AsyncMock(return_value=Company(id="acme", name="Acme GmbH"))
    return store


@pytest.fixture
def mock_renderer():
    renderer = MagicMock()
    renderer.render_invoice = MagicMock(return_value=b"%PDF fake")
    return renderer


@pytest.fixture
def create_use_case(
    mock_invoice_store, mock_company_store, mock_renderer, mock_email_sender
) -> CreateInvoiceUseCase:
    return CreateInvoiceUseCase(
        invoice_store=mock_invoice_store,
        company_store=mock_company_store,
        renderer=mock_renderer,
        email_sender=mock_email_sender,
        settings=Settings(),
        rng=random.Random(5),
    )


@pytest.fixture
async def invoices_client(create_use_case, mock_invoice_store):
    """Async client with invoice use cases wired to mocks."""
    app.dependency_overrides[get_create_invoice_use_case] = lambda: create_use_case
    app.dependency_overrides[get_list_invoices_use_case] = lambda: ListInvoicesUseCase(
        mock_invoice_store
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_create_invoice_use_case, None)
    app.dependency_overrides.pop(get_list_invoices_use_case, None)


class TestCreateInvoiceEndpoint:
    async def test_creates_invoice(self, invoices_client, auth_headers, invoice_body):
        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["invoice_id"] == 42
        assert data["stage"] == "complete"
        assert data["status"] == "pending"
        assert data["total"] == pytest.approx(209)
        assert data["email_id"] == "email-1"

    async def test_unauthenticated(self, invoices_client, invoice_body, mock_invoice_store):
        response = await invoices_client.post("/api/invoices", json=invoice_body)

        assert response.status_code == 401
        assert response.json()["error_code"] == "NOT_AUTHENTICATED"
        mock_invoice_store.create_invoice.assert_not_awaited()

    async def test_missing_company(self, invoices_client, auth_headers, invoice_body):
        headers = {k: v for k, v in auth_headers.items() if k != "X-Company-Id"}
        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Missing company profile."

    async def test_viewer_forbidden(self, invoices_client, viewer_headers, invoice_body, mock_invoice_store):
        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=viewer_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You do not have permission to create invoices."
        mock_invoice_store.create_invoice.assert_not_awaited()

    async def test_invalid_items(self, invoices_client, auth_headers, invoice_body, mock_invoice_store):
        invoice_body["items"][0]["quantity"] = 0
        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=auth_headers)

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "INVALID_LINE_ITEMS"
        assert data["stage"] == "validated"
        assert data["invoice_id"] is None
        mock_invoice_store.create_invoice.assert_not_awaited()

    async def test_malformed_body(self, invoices_client, auth_headers, invoice_body):
        invoice_body["items"][0]["quantity"] = "lots"
        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_delivery_failure_returns_invoice_id(
        self, invoices_client, auth_headers, invoice_body, mock_email_sender
    ):
        mock_email_sender.send.side_effect = DeliveryError("Email provider returned HTTP 500: oops", 500)

        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=auth_headers)

        assert response.status_code == 502
        data = response.json()
        assert data["error_code"] == "DELIVERY_FAILED"
        assert data["stage"] == "notified"
        assert data["invoice_id"] == 42
        assert "do not resubmit" in data["hint"]

    async def test_render_failure_after_save(
        self, invoices_client, auth_headers, invoice_body, mock_renderer, mock_email_sender
    ):
        mock_renderer.render_invoice.side_effect = RenderError("invoice", "font missing")

        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=auth_headers)

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "RENDER_FAILED"
        assert data["stage"] == "document_rendered"
        assert data["invoice_id"] == 42
        assert data["hint"].startswith("The invoice was saved.")
        mock_email_sender.send.assert_not_awaited()

    async def test_store_error_after_save_returns_invoice_id(
        self, invoices_client, auth_headers, invoice_body, mock_company_store
    ):
        mock_company_store.get_company.side_effect = aiosqlite.OperationalError("database is locked")

        response = await invoices_client.post("/api/invoices", json=invoice_body, headers=auth_headers)

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "DISPATCH_FAILED"
        assert data["stage"] == "document_rendered"
        assert data["invoice_id"] == 42
        assert "do not resubmit" in data["hint"]


class TestListInvoicesEndpoint:
    async def test_lists_invoices(self, invoices_client, viewer_headers):
        response = await invoices_client.get("/api/invoices", headers=viewer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["invoices"][0]["invoice_number"] == "INV-20260115-4821"
        assert data["invoices"][0]["status"] == "pending"

    async def test_request_id_header(self, invoices_client, viewer_headers):
        response = await invoices_client.get(
            "/api/invoices", headers={**viewer_headers, "X-Request-ID": "req-123"}
        )
        assert response.headers["X-Request-ID"] == "req-123"
        assert "X-Response-Time" in response.headers


class TestExportEndpoint:
    @pytest.fixture
    def mock_use_case(self):
        uc = AsyncMock()
        uc.execute.return_value = DocumentResult(
            pdf_bytes=b"%PDF-1.3 export",
            filename="invoices-export.pdf",
            file_size=15,
        )
        return uc

    @pytest.fixture
    async def export_client(self, mock_use_case):
        app.dependency_overrides[get_export_invoices_use_case] = lambda: mock_use_case
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
        app.dependency_overrides.pop(get_export_invoices_use_case, None)

    async def test_export_all(self, export_client, auth_headers, mock_use_case):
        response = await export_client.post("/api/invoices/export", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert (
            response.headers["content-disposition"]
            == 'attachment; filename="invoices-export.pdf"'
        )
        assert response.content == b"%PDF-1.3 export"
        assert mock_use_case.execute.await_args.kwargs["ids"] is None

    async def test_export_selected(self, export_client, auth_headers, mock_use_case):
        response = await export_client.post(
            "/api/invoices/export", json={"ids": [3, 1]}, headers=auth_headers
        )

        assert response.status_code == 200
        assert mock_use_case.execute.await_args.kwargs["ids"] == [3, 1]

    async def test_viewer_forbidden(self, export_client, viewer_headers, mock_use_case):
        response = await export_client.post("/api/invoices/export", headers=viewer_headers)

        assert response.status_code == 403
        mock_use_case.execute.assert_not_awaited()

    async def test_render_failure_hint_without_invoice(self, export_client, auth_headers, mock_use_case):
        mock_use_case.execute.side_effect = RenderError("invoice export", "layout failed")

        response = await export_client.post("/api/invoices/export", headers=auth_headers)

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "RENDER_FAILED"
        assert data["invoice_id"] is None
        assert data["hint"] == "The document could not be generated. Retry the download later."
