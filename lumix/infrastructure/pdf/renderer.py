"""
Invoice, export and payroll PDF renderer using fpdf2.

All documents share one layout: A4 in points with 40pt margins, a title
block, a fixed-column table and a right-aligned totals block. Rows are
placed by ``layout_rows`` so every document paginates the same way.
"""

import math
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from fpdf import FPDF

from lumix.config import get_logger
from lumix.config.settings import PdfSettings, get_settings
from lumix.core.entities.invoice import ExportBatch, Invoice
from lumix.core.entities.payroll import PayrollRun
from lumix.core.exceptions import RenderError
from lumix.core.services.money import format_amount

logger = get_logger(__name__)

# A4 in points
PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89
MARGIN = 40
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

# Pagination
ROW_HEIGHT = 16
PAGE_BREAK_Y = 760
CONTINUATION_Y = 50
HEADER_GAP = 14

# Characters outside the core font encoding
_SUBSTITUTIONS = {
    "€": "EUR ",
    "–": "-",
    "—": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "…": "...",
}

_UNICODE_FAMILY = "LumixUnicode"


def layout_rows(count: int, start_y: float) -> list[tuple[int, float]]:
    """
    Place ``count`` table rows starting at ``start_y`` on the first page.

    A row is drawn at the cursor, then the cursor advances by ROW_HEIGHT.
    Once the cursor passes PAGE_BREAK_Y the next row starts a new page at
    CONTINUATION_Y.

    Returns:
        ``(page_index, y)`` per row, page_index counted from 0.
    """
    positions: list[tuple[int, float]] = []
    page_index, y = 0, start_y
    for _ in range(count):
        positions.append((page_index, y))
        y += ROW_HEIGHT
        if y > PAGE_BREAK_Y:
            page_index += 1
            y = CONTINUATION_Y
    return positions


@dataclass(frozen=True)
class _Column:
    header: str
    x: float
    width: float
    align: str = "L"
    max_chars: int | None = None


_INVOICE_COLUMNS = (
    _Column("Description", 40, 200, max_chars=40),
    _Column("Qty", 240, 50, "R"),
    _Column("Unit price", 290, 80, "R"),
    _Column("Tax %", 370, 50, "R"),
    _Column("Disc. %", 420, 50, "R"),
    _Column("Total", 470, 85, "R"),
)

_EXPORT_COLUMNS = (
    _Column("Invoice #", 40, 90),
    _Column("Client", 130, 190, max_chars=36),
    _Column("Amount", 320, 80, "R"),
    _Column("Status", 410, 70),
    _Column("Due", 480, 75),
)

_PAYROLL_COLUMNS = (
    _Column("Employee", 40, 175, max_chars=32),
    _Column("Gross", 215, 85, "R"),
    _Column("Tax", 300, 85, "R"),
    _Column("Deductions", 385, 85, "R"),
    _Column("Net", 470, 85, "R"),
)


class IDocumentRenderer(ABC):
    """Interface for business document rendering."""

    @abstractmethod
    def render_invoice(
        self,
        invoice: Invoice,
        company_name: str,
        generated_at: datetime | None = None,
    ) -> bytes:
        """Render a single computed invoice into PDF bytes."""
        ...

    @abstractmethod
    def render_export(self, batch: ExportBatch) -> bytes:
        """Render a list of invoice summaries into PDF bytes."""
        ...

    @abstractmethod
    def render_payroll_run(
        self,
        run: PayrollRun,
        company_name: str,
        generated_at: datetime | None = None,
    ) -> bytes:
        """Render a payroll run with its items into PDF bytes."""
        ...


class _LumixPdf(FPDF):
    """FPDF subclass that renders a footer on every page."""

    def __init__(self, generated_label: str) -> None:
        super().__init__(unit="pt", format="A4")
        self._generated_label = generated_label
        self.footer_label = ""
        self.footer_font = "Helvetica"
        self.unicode_font_loaded = False

    def load_unicode_font(self, font_path: str) -> None:
        self.add_font(_UNICODE_FAMILY, "", font_path)
        self.unicode_font_loaded = True
        self.footer_font = _UNICODE_FAMILY

    def safe_text(self, text: str | None) -> str:
        """Return *text* safe for the loaded font."""
        if not text:
            return ""
        if self.unicode_font_loaded:
            return text
        for char, replacement in _SUBSTITUTIONS.items():
            text = text.replace(char, replacement)
        return text.encode("latin-1", errors="replace").decode("latin-1")

    def use_font(self, style: str = "", size: int = 10) -> None:
        if self.unicode_font_loaded:
            self.set_font(_UNICODE_FAMILY, "", size)
        else:
            self.set_font("Helvetica", style, size)

    def footer(self) -> None:
        """Render footer with page numbers and generation date."""
        style = "I" if self.footer_font == "Helvetica" else ""
        self.set_font(self.footer_font, style, 8)
        self.set_text_color(120, 120, 120)
        half = CONTENT_WIDTH / 2
        self.set_xy(MARGIN, PAGE_HEIGHT - 30)
        self.cell(half, 10, self.footer_label, align="L")
        self.set_xy(MARGIN + half, PAGE_HEIGHT - 30)
        self.cell(
            half,
            10,
            f"Page {self.page_no()} of {{nb}} | {self._generated_label}",
            align="R",
        )
        self.set_text_color(0, 0, 0)


class Fpdf2DocumentRenderer(IDocumentRenderer):
    """Renders invoices, invoice exports and payroll runs with fpdf2."""

    def __init__(self, pdf_settings: PdfSettings | None = None) -> None:
        if pdf_settings is None:
            pdf_settings = get_settings().pdf
        self._settings = pdf_settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_invoice(
        self,
        invoice: Invoice,
        company_name: str,
        generated_at: datetime | None = None,
    ) -> bytes:
        try:
            generated_at = generated_at or invoice.created_at
            pdf = self._new_document(generated_at, f"Invoice {invoice.invoice_number}")

            meta = [
                ("Invoice No", invoice.invoice_number),
                ("Date", invoice.created_at.date().isoformat()),
                ("Due date", invoice.due_date.isoformat() if invoice.due_date else "No due date"),
                ("Bill to", invoice.client_name),
            ]
            if invoice.client_email:
                meta.append(("Email", invoice.client_email))
            meta.append(("Status", invoice.status.value))

            y = self._draw_title_block(pdf, "INVOICE", company_name, meta)
            if invoice.notes:
                y = self._draw_notes(pdf, invoice.notes, y)

            rows = [
                [
                    item.description,
                    f"{item.quantity:g}",
                    format_amount(item.unit_price, invoice.currency),
                    f"{item.tax_rate:g}",
                    f"{item.discount_rate:g}",
                    format_amount(item.line_total, invoice.currency),
                ]
                for item in invoice.items
            ]
            totals = [
                ("Subtotal", format_amount(invoice.subtotal, invoice.currency), False),
                ("Discount", format_amount(invoice.discount_total, invoice.currency), False),
                ("Tax", format_amount(invoice.tax_total, invoice.currency), False),
                ("Total", format_amount(invoice.total, invoice.currency), True),
            ]
            self._draw_table(pdf, _INVOICE_COLUMNS, rows, totals, y)

            output = bytes(pdf.output())
        except Exception as e:
            raise RenderError("invoice", str(e), invoice_id=invoice.id) from e

        logger.debug(
            "invoice_pdf_rendered",
            invoice_number=invoice.invoice_number,
            items=len(invoice.items),
            size=len(output),
        )
        return output

    def render_export(self, batch: ExportBatch) -> bytes:
        try:
            pdf = self._new_document(batch.generated_at, "Invoices export")

            meta = [
                ("Generated", batch.generated_at.strftime("%Y-%m-%d %H:%M UTC")),
                ("Invoices", str(len(batch.invoices))),
            ]
            y = self._draw_title_block(pdf, "INVOICES EXPORT", batch.company_name, meta)

            rows = [
                [
                    summary.invoice_number,
                    summary.client,
                    format_amount(summary.amount, summary.currency),
                    summary.status.value,
                    summary.due_date.isoformat() if summary.due_date else "-",
                ]
                for summary in batch.invoices
            ]
            if not rows:
                rows = [["No invoices to export.", "", "", "", ""]]

            # One total line per currency, in first-seen order
            sums: dict[str, float] = {}
            for summary in batch.invoices:
                amount = summary.amount if math.isfinite(summary.amount) else 0.0
                sums[summary.currency] = sums.get(summary.currency, 0.0) + amount
            totals = [
                (f"Total {currency}", format_amount(amount, currency), True)
                for currency, amount in sums.items()
            ]
            self._draw_table(pdf, _EXPORT_COLUMNS, rows, totals, y)

            output = bytes(pdf.output())
        except Exception as e:
            raise RenderError("invoice export", str(e)) from e

        logger.debug("export_pdf_rendered", invoices=len(batch.invoices), size=len(output))
        return output

    def render_payroll_run(
        self,
        run: PayrollRun,
        company_name: str,
        generated_at: datetime | None = None,
    ) -> bytes:
        try:
            generated_at = generated_at or run.created_at
            pdf = self._new_document(generated_at, f"Payroll run {run.run_date.isoformat()}")

            meta = [
                ("Run date", run.run_date.isoformat()),
                ("Frequency", run.frequency),
                ("Currency", run.currency),
                ("Status", run.status.value),
                ("Employees", str(len(run.items))),
            ]
            y = self._draw_title_block(pdf, "PAYROLL RUN", company_name, meta)

            rows = [
                [
                    item.employee_id,
                    format_amount(item.gross, run.currency),
                    format_amount(item.tax, run.currency),
                    format_amount(item.deductions, run.currency),
                    format_amount(item.net, run.currency),
                ]
                for item in run.items
            ]
            totals = [
                ("Total gross", format_amount(run.total_gross, run.currency), False),
                ("Total tax", format_amount(run.total_tax, run.currency), False),
                ("Total deductions", format_amount(run.total_deductions, run.currency), False),
                ("Total net", format_amount(run.total_net, run.currency), True),
            ]
            self._draw_table(pdf, _PAYROLL_COLUMNS, rows, totals, y)

            output = bytes(pdf.output())
        except Exception as e:
            raise RenderError("payroll run", str(e)) from e

        logger.debug("payroll_pdf_rendered", run_id=run.id, items=len(run.items), size=len(output))
        return output

    # ------------------------------------------------------------------
    # Document setup and fonts
    # ------------------------------------------------------------------

    def _new_document(self, generated_at: datetime, title: str) -> _LumixPdf:
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=UTC)

        pdf = _LumixPdf(generated_label=generated_at.strftime("%Y-%m-%d %H:%M UTC"))

        font_path = self._settings.unicode_font_path
        if font_path and os.path.isfile(font_path):
            try:
                pdf.load_unicode_font(font_path)
            except Exception as e:
                logger.warning("unicode_font_load_failed", path=font_path, error=str(e))

        pdf.footer_label = pdf.safe_text(self._settings.footer_text)
        pdf.set_margins(MARGIN, MARGIN, MARGIN)
        pdf.set_auto_page_break(False)
        pdf.set_creation_date(generated_at)
        pdf.set_title(pdf.safe_text(title))
        pdf.alias_nb_pages()
        pdf.add_page()
        return pdf

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _draw_title_block(
        self,
        pdf: _LumixPdf,
        title: str,
        company_name: str,
        meta: Sequence[tuple[str, str]],
    ) -> float:
        """Draw title, company name and label/value lines. Returns next y."""
        pdf.set_xy(MARGIN, MARGIN)
        pdf.use_font("B", 18)
        pdf.cell(CONTENT_WIDTH / 2, 22, pdf.safe_text(title), align="L")

        pdf.set_xy(MARGIN + CONTENT_WIDTH / 2, MARGIN)
        pdf.use_font("B", 11)
        pdf.cell(CONTENT_WIDTH / 2, 22, pdf.safe_text(company_name), align="R")

        y = MARGIN + 34.0
        for label, value in meta:
            pdf.set_xy(MARGIN, y)
            pdf.use_font("B", 9)
            pdf.cell(80, 12, pdf.safe_text(f"{label}:"))
            pdf.set_xy(MARGIN + 80, y)
            pdf.use_font("", 9)
            pdf.cell(CONTENT_WIDTH - 80, 12, pdf.safe_text(value))
            y += 13

        y += 6
        pdf.set_draw_color(100, 100, 100)
        pdf.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
        pdf.set_draw_color(0, 0, 0)
        return y + 10

    def _draw_notes(self, pdf: _LumixPdf, notes: str, y: float) -> float:
        pdf.set_xy(MARGIN, y)
        pdf.use_font("I", 9)
        pdf.multi_cell(CONTENT_WIDTH, 11, pdf.safe_text(f"Notes: {notes[:300]}"))
        return pdf.get_y() + 8

    def _draw_table(
        self,
        pdf: _LumixPdf,
        columns: Sequence[_Column],
        rows: Sequence[Sequence[str]],
        totals: Sequence[tuple[str, str, bool]],
        header_y: float,
    ) -> None:
        """Draw column headers, rows and the totals block below them."""
        pdf.use_font("B", 9)
        pdf.set_fill_color(70, 70, 70)
        pdf.set_text_color(255, 255, 255)
        pdf.rect(MARGIN, header_y - 2, CONTENT_WIDTH, 13, style="F")
        for column in columns:
            pdf.set_xy(column.x, header_y)
            pdf.cell(column.width, 10, column.header, align=column.align)
        pdf.set_text_color(0, 0, 0)

        # Rows and totals share one layout; a blank line separates them
        line_count = len(rows) + (len(totals) + 1 if totals else 0)
        base_page = pdf.page
        for index, (page_index, y) in enumerate(layout_rows(line_count, header_y + HEADER_GAP)):
            while pdf.page < base_page + page_index:
                pdf.add_page()

            if index < len(rows):
                if index % 2 == 1:
                    pdf.set_fill_color(240, 240, 240)
                    pdf.rect(MARGIN, y - 3, CONTENT_WIDTH, ROW_HEIGHT, style="F")
                pdf.use_font("", 8)
                for column, value in zip(columns, rows[index]):
                    text = pdf.safe_text(value)
                    if column.max_chars and len(text) > column.max_chars:
                        text = text[: column.max_chars - 3] + "..."
                    pdf.set_xy(column.x, y)
                    pdf.cell(column.width, 10, text, align=column.align)
            elif index > len(rows):
                label, value, bold = totals[index - len(rows) - 1]
                pdf.use_font("B" if bold else "", 10 if bold else 9)
                pdf.set_xy(PAGE_WIDTH - MARGIN - 225, y)
                pdf.cell(130, 10, pdf.safe_text(f"{label}:"), align="R")
                pdf.set_xy(PAGE_WIDTH - MARGIN - 85, y)
                pdf.cell(85, 10, pdf.safe_text(value), align="R")
