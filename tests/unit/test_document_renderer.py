"""Tests for the fpdf2 document renderer."""

import re
import zlib
from datetime import UTC, date, datetime
from unittest.mock import patch

import pytest

from lumix.config.settings import PdfSettings
from lumix.core.entities.invoice import (
    ExportBatch,
    Invoice,
    InvoiceStatus,
    InvoiceSummary,
    LineItem,
)
from lumix.core.entities.payroll import PayrollRun, PayrollRunItem
from lumix.core.exceptions import RenderError
from lumix.infrastructure.pdf import (
    CONTINUATION_Y,
    PAGE_BREAK_Y,
    ROW_HEIGHT,
    Fpdf2DocumentRenderer,
    layout_rows,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def renderer() -> Fpdf2DocumentRenderer:
    return Fpdf2DocumentRenderer(PdfSettings(company_name="Fallback Co", footer_text="Test Footer"))


@pytest.fixture
def sample_invoice() -> Invoice:
    return Invoice(
        id=1,
        company_id="acme",
        invoice_number="INV-20260115-4821",
        client_name="Globex",
        client_email="billing@globex.test",
        currency="EUR",
        items=[
            LineItem(
                description="Consulting",
                quantity=2,
                unit_price=100,
                tax_rate=10,
                discount_rate=5,
                line_total=209,
            )
        ],
        due_date=date(2026, 2, 15),
        notes="Payment by bank transfer",
        subtotal=200,
        discount_total=10,
        tax_total=19,
        total=209,
        created_at=datetime(2026, 1, 15, 9, 30),
    )


def _last_page_stream(pdf_bytes: bytes) -> str:
    """Content stream of the last page that carries a footer."""
    streams = [
        zlib.decompress(raw).decode("latin-1")
        for raw in re.findall(rb"stream\n(.*?)\nendstream", pdf_bytes, re.DOTALL)
    ]
    return next(s for s in reversed(streams) if "Page " in s)


def _summaries(count: int) -> list[InvoiceSummary]:
    return [
        InvoiceSummary(
            id=i,
            invoice_number=f"INV-20260101-{1000 + i}",
            client=f"Client {i}",
            amount=100.0 + i,
            currency="USD",
            status=InvoiceStatus.PENDING,
        )
        for i in range(count)
    ]


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class TestLayoutRows:
    def test_rows_advance_by_row_height(self):
        positions = layout_rows(3, 100)
        assert positions == [(0, 100), (0, 100 + ROW_HEIGHT), (0, 100 + 2 * ROW_HEIGHT)]

    def test_breaks_to_continuation_position(self):
        positions = layout_rows(3, PAGE_BREAK_Y - ROW_HEIGHT)
        assert positions[0] == (0, PAGE_BREAK_Y - ROW_HEIGHT)
        assert positions[1] == (0, PAGE_BREAK_Y)
        assert positions[2] == (1, CONTINUATION_Y)

    def test_no_row_below_break_line(self):
        for page, y in layout_rows(200, 150):
            assert y <= PAGE_BREAK_Y
            if page > 0:
                assert y >= CONTINUATION_Y

    def test_zero_rows(self):
        assert layout_rows(0, 150) == []


# ---------------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------------


class TestRenderInvoice:
    def test_returns_pdf(self, renderer, sample_invoice):
        pdf_bytes = renderer.render_invoice(sample_invoice, "Acme GmbH")
        assert pdf_bytes.startswith(b"%PDF")

    def test_contains_invoice_details(self, renderer, sample_invoice, pdf_text):
        text = pdf_text(renderer.render_invoice(sample_invoice, "Acme GmbH"))
        assert "INVOICE" in text
        assert "Acme GmbH" in text
        assert "INV-20260115-4821" in text
        assert "Globex" in text
        assert "2026-02-15" in text
        assert "Test Footer" in text

    def test_euro_sign_substituted(self, renderer, sample_invoice, pdf_text):
        text = pdf_text(renderer.render_invoice(sample_invoice, "Acme GmbH"))
        assert "EUR 209.00" in text

    def test_missing_due_date(self, renderer, sample_invoice, pdf_text):
        invoice = sample_invoice.model_copy(update={"due_date": None})
        text = pdf_text(renderer.render_invoice(invoice, "Acme GmbH"))
        assert "No due date" in text

    def test_page_footer_counts_pages(self, renderer, sample_invoice, pdf_text):
        text = pdf_text(renderer.render_invoice(sample_invoice, "Acme GmbH"))
        assert "Page 1 of 1" in text

    def test_unencodable_text_does_not_fail(self, renderer, sample_invoice):
        invoice = sample_invoice.model_copy(update={"client_name": "Zoë “Quotes” Ltd ☃"})
        assert renderer.render_invoice(invoice, "Acme – GmbH").startswith(b"%PDF")

    def test_failure_raises_render_error(self, renderer, sample_invoice):
        with patch.object(Fpdf2DocumentRenderer, "_draw_table", side_effect=RuntimeError("boom")):
            with pytest.raises(RenderError) as exc_info:
                renderer.render_invoice(sample_invoice, "Acme GmbH")
        assert exc_info.value.invoice_id == 1
        assert "boom" in str(exc_info.value)

    def test_many_lines_paginate_every_item_once_in_order(
        self, renderer, sample_invoice, pdf_text, pdf_pages
    ):
        items = [
            LineItem(description=f"Line item {i:03d}", quantity=1, unit_price=10, line_total=10)
            for i in range(80)
        ]
        invoice = sample_invoice.model_copy(update={"items": items, "total": 800})
        pdf_bytes = renderer.render_invoice(invoice, "Acme GmbH")
        text = pdf_text(pdf_bytes)

        pages = pdf_pages(pdf_bytes)
        assert pages > 1
        positions = []
        for item in items:
            assert text.count(item.description) == 1
            positions.append(text.index(item.description))
        assert positions == sorted(positions)

        last_page = _last_page_stream(pdf_bytes)
        assert f"Page {pages} of {pages}" in last_page
        assert "EUR 800.00" in last_page


class TestFontSelection:
    def test_missing_unicode_font_uses_core_font(self, sample_invoice, pdf_text):
        renderer = Fpdf2DocumentRenderer(PdfSettings(unicode_font_path="/nonexistent/font.ttf"))
        text = pdf_text(renderer.render_invoice(sample_invoice, "Acme GmbH"))
        assert "EUR 209.00" in text

    def test_font_choice_is_per_document(self, renderer):
        generated_at = datetime(2026, 1, 15, tzinfo=UTC)
        first = renderer._new_document(generated_at, "First")
        first.unicode_font_loaded = True
        second = renderer._new_document(generated_at, "Second")

        assert first.safe_text("€5") == "€5"
        assert second.safe_text("€5") == "EUR 5"


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestRenderExport:
    def test_single_page(self, renderer, pdf_text, pdf_pages):
        batch = ExportBatch(
            company_name="Acme GmbH",
            generated_at=datetime(2026, 1, 15, 12, 0, tzinfo=UTC),
            invoices=_summaries(3),
        )
        pdf_bytes = renderer.render_export(batch)
        text = pdf_text(pdf_bytes)

        assert pdf_pages(pdf_bytes) == 1
        assert "INVOICES EXPORT" in text
        assert "2026-01-15 12:00 UTC" in text
        assert "INV-20260101-1000" in text
        assert "Client 2" in text
        assert "$102.00" in text
        assert "pending" in text
        assert "Total USD" in text
        assert "$303.00" in text

    def test_long_export_paginates_every_row_once_in_order(self, renderer, pdf_text, pdf_pages):
        summaries = _summaries(60)
        batch = ExportBatch(company_name="Acme GmbH", invoices=summaries)
        pdf_bytes = renderer.render_export(batch)
        text = pdf_text(pdf_bytes)

        assert pdf_pages(pdf_bytes) > 1
        positions = []
        for summary in summaries:
            assert text.count(summary.invoice_number) == 1
            positions.append(text.index(summary.invoice_number))
        assert positions == sorted(positions)

    def test_totals_per_currency(self, renderer, pdf_text):
        invoices = _summaries(2) + [
            InvoiceSummary(invoice_number="INV-20260101-9999", client="Euro Client", amount=50, currency="EUR")
        ]
        text = pdf_text(renderer.render_export(ExportBatch(company_name="Acme", invoices=invoices)))
        assert "Total USD" in text
        assert "Total EUR" in text
        assert "EUR 50.00" in text

    def test_empty_export(self, renderer, pdf_text, pdf_pages):
        pdf_bytes = renderer.render_export(ExportBatch(company_name="Acme GmbH"))
        assert pdf_pages(pdf_bytes) == 1
        assert "No invoices to export." in pdf_text(pdf_bytes)

    def test_totals_on_last_page(self, renderer, pdf_pages):
        pdf_bytes = renderer.render_export(ExportBatch(company_name="Acme", invoices=_summaries(100)))
        pages = pdf_pages(pdf_bytes)
        last_page = _last_page_stream(pdf_bytes)
        assert f"Page {pages} of {pages}" in last_page
        assert "Total USD" in last_page


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


class TestRenderPayrollRun:
    def test_contains_items_and_totals(self, renderer, pdf_text):
        run = PayrollRun(
            id=5,
            company_id="acme",
            run_date=date(2026, 1, 31),
            frequency="monthly",
            currency="USD",
            items=[
                PayrollRunItem(employee_id="emp-1", gross=1000, tax=200, deductions=50, net=750),
                PayrollRunItem(employee_id="emp-2", gross=100, tax=80, deductions=50, net=-30),
            ],
            total_gross=1100,
            total_tax=280,
            total_deductions=100,
            total_net=720,
        )
        text = pdf_text(renderer.render_payroll_run(run, "Acme GmbH"))
        assert "PAYROLL RUN" in text
        assert "2026-01-31" in text
        assert "emp-1" in text
        assert "$750.00" in text
        assert "$-30.00" in text
        assert "Total net" in text
        assert "$720.00" in text

    def test_many_employees_paginate_with_totals_last(self, renderer, pdf_text, pdf_pages):
        items = [
            PayrollRunItem(employee_id=f"emp-{i:03d}", gross=1000, tax=200, deductions=50, net=750)
            for i in range(80)
        ]
        run = PayrollRun(
            id=6,
            company_id="acme",
            run_date=date(2026, 1, 31),
            frequency="monthly",
            currency="USD",
            items=items,
            total_gross=80_000,
            total_tax=16_000,
            total_deductions=4_000,
            total_net=60_000,
        )
        pdf_bytes = renderer.render_payroll_run(run, "Acme GmbH")
        text = pdf_text(pdf_bytes)

        pages = pdf_pages(pdf_bytes)
        assert pages > 1
        positions = []
        for item in items:
            assert text.count(item.employee_id) == 1
            positions.append(text.index(item.employee_id))
        assert positions == sorted(positions)

        last_page = _last_page_stream(pdf_bytes)
        assert f"Page {pages} of {pages}" in last_page
        assert "Total net" in last_page
        assert "$60000.00" in last_page
