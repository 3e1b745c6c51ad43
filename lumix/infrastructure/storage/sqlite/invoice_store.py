"""SQLite implementation of invoice storage."""

from datetime import UTC, date, datetime

import aiosqlite

from lumix.config import get_logger
from lumix.core.entities.invoice import Invoice, InvoiceStatus, InvoiceSummary, LineItem
from lumix.core.entities.report import SoldItem
from lumix.core.exceptions import DuplicateInvoiceNumberError, PersistenceError
from lumix.core.interfaces.invoice_store import IInvoiceStore
from lumix.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def _parse_datetime(value: str | None) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            pass
    return datetime.now(UTC).replace(tzinfo=None)


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage."""

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """Insert header and items in one transaction."""
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO invoices (
                        company_id, invoice_number, client_id, client_name,
                        client_email, currency, due_date, notes,
                        subtotal, discount_total, tax_total, total,
                        status, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        invoice.company_id,
                        invoice.invoice_number,
                        invoice.client_id,
                        invoice.client_name,
                        invoice.client_email,
                        invoice.currency,
                        invoice.due_date.isoformat() if invoice.due_date else None,
                        invoice.notes,
                        invoice.subtotal,
                        invoice.discount_total,
                        invoice.tax_total,
                        invoice.total,
                        invoice.status.value,
                        invoice.created_at.isoformat(),
                    ),
                )
                invoice_id = cursor.lastrowid

                item_ids: list[int | None] = []
                for line_number, item in enumerate(invoice.items, 1):
                    item_cursor = await conn.execute(
                        """
                        INSERT INTO invoice_items (
                            invoice_id, line_number, description, quantity,
                            unit_price, tax_rate, discount_rate, line_total
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            invoice_id,
                            line_number,
                            item.description,
                            item.quantity,
                            item.unit_price,
                            item.tax_rate,
                            item.discount_rate,
                            item.line_total,
                        ),
                    )
                    item_ids.append(item_cursor.lastrowid)
        except aiosqlite.IntegrityError as e:
            if "invoice_number" in str(e) or "UNIQUE" in str(e):
                raise DuplicateInvoiceNumberError(invoice.invoice_number) from e
            raise PersistenceError("save invoice", str(e)) from e
        except aiosqlite.Error as e:
            raise PersistenceError("save invoice", str(e)) from e

        # Assign IDs only after commit
        invoice.id = invoice_id
        for item, item_id in zip(invoice.items, item_ids):
            item.invoice_id = invoice_id
            item.id = item_id

        logger.info(
            "invoice_created",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            items=len(invoice.items),
            total=invoice.total,
        )
        return invoice

    async def get_invoice(self, company_id: str, invoice_id: int) -> Invoice | None:
        """Get invoice by ID with items."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM invoices WHERE id = ? AND company_id = ?",
                (invoice_id, company_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            items_cursor = await conn.execute(
                """
                SELECT * FROM invoice_items
                WHERE invoice_id = ?
                ORDER BY line_number
                """,
                (invoice_id,),
            )
            item_rows = await items_cursor.fetchall()
            items = [self._row_to_line_item(r) for r in item_rows]

            return self._row_to_invoice(row, items)

    async def list_summaries(
        self,
        company_id: str,
        ids: list[int] | None = None,
        limit: int | None = None,
    ) -> list[InvoiceSummary]:
        """List invoice summaries, newest first."""
        sql = """
            SELECT id, invoice_number, client_name, total, currency,
                   status, due_date, created_at
            FROM invoices
            WHERE company_id = ?
        """
        params: list = [company_id]

        if ids:
            sql += f" AND id IN ({', '.join('?' for _ in ids)})"
            params.extend(ids)

        sql += " ORDER BY created_at DESC, id DESC"

        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        async with get_connection() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()

        return [
            InvoiceSummary(
                id=row["id"],
                invoice_number=row["invoice_number"],
                client=row["client_name"],
                amount=float(row["total"]),
                currency=row["currency"] or "EUR",
                status=InvoiceStatus(row["status"]),
                due_date=_parse_date(row["due_date"]),
                created_at=_parse_datetime(row["created_at"]),
            )
            for row in rows
        ]

    async def list_sold_items(self, company_id: str) -> list[SoldItem]:
        """All line items of the company's invoices, in the order they were saved."""
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT ii.description, ii.quantity, ii.unit_price, ii.line_total
                    FROM invoice_items ii
                    JOIN invoices i ON i.id = ii.invoice_id
                    WHERE i.company_id = ?
                    ORDER BY ii.id
                    """,
                    (company_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError("load sales data", str(e)) from e

        return [
            SoldItem(
                description=row["description"],
                quantity=float(row["quantity"]),
                unit_price=float(row["unit_price"]),
                line_total=float(row["line_total"]),
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row, items: list[LineItem]) -> Invoice:
        """Convert a database row to an Invoice entity."""
        return Invoice(
            id=row["id"],
            company_id=row["company_id"],
            invoice_number=row["invoice_number"],
            client_id=row["client_id"],
            client_name=row["client_name"],
            client_email=row["client_email"],
            currency=row["currency"],
            due_date=_parse_date(row["due_date"]),
            notes=row["notes"],
            subtotal=float(row["subtotal"]),
            discount_total=float(row["discount_total"]),
            tax_total=float(row["tax_total"]),
            total=float(row["total"]),
            status=InvoiceStatus(row["status"]),
            items=items,
            created_at=_parse_datetime(row["created_at"]),
        )

    @staticmethod
    def _row_to_line_item(row: aiosqlite.Row) -> LineItem:
        """Convert a database row to a LineItem entity."""
        return LineItem(
            id=row["id"],
            invoice_id=row["invoice_id"],
            description=row["description"],
            quantity=float(row["quantity"]),
            unit_price=float(row["unit_price"]),
            tax_rate=float(row["tax_rate"]),
            discount_rate=float(row["discount_rate"]),
            line_total=float(row["line_total"]),
        )
