"""SQLite implementation of payroll run storage."""

from datetime import UTC, date, datetime

import aiosqlite

from lumix.config import get_logger
from lumix.core.entities.payroll import PayrollRun, PayrollRunItem, PayrollRunStatus
from lumix.core.exceptions import PersistenceError
from lumix.core.interfaces.payroll_store import IPayrollStore
from lumix.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLitePayrollStore(IPayrollStore):
    """SQLite implementation of payroll run storage."""

    async def create_run(self, run: PayrollRun) -> PayrollRun:
        """Insert the run and its items in one transaction."""
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO payroll_runs (
                        company_id, run_date, frequency, currency, status,
                        total_gross, total_tax, total_deductions, total_net,
                        created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        run.company_id,
                        run.run_date.isoformat(),
                        run.frequency,
                        run.currency,
                        run.status.value,
                        run.total_gross,
                        run.total_tax,
                        run.total_deductions,
                        run.total_net,
                        run.created_at.isoformat(),
                    ),
                )
                run_id = cursor.lastrowid

                await conn.executemany(
                    """
                    INSERT INTO payroll_items (
                        payroll_run_id, employee_id, gross, tax, deductions, net
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (run_id, item.employee_id, item.gross, item.tax, item.deductions, item.net)
                        for item in run.items
                    ],
                )
        except aiosqlite.Error as e:
            raise PersistenceError("create payroll run", str(e)) from e

        run.id = run_id
        for item in run.items:
            item.payroll_run_id = run_id

        logger.info(
            "payroll_run_created",
            run_id=run.id,
            items=len(run.items),
            total_net=run.total_net,
        )
        return run

    async def get_run(self, company_id: str, run_id: int) -> PayrollRun | None:
        """Get payroll run by ID with items."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM payroll_runs WHERE id = ? AND company_id = ?",
                (run_id, company_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            items_cursor = await conn.execute(
                "SELECT * FROM payroll_items WHERE payroll_run_id = ? ORDER BY id",
                (run_id,),
            )
            item_rows = await items_cursor.fetchall()

        return self._row_to_run(row, [self._row_to_item(r) for r in item_rows])

    async def list_runs(self, company_id: str, limit: int = 10) -> list[PayrollRun]:
        """List the latest runs, newest first, without items."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM payroll_runs
                WHERE company_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (company_id, limit),
            )
            rows = await cursor.fetchall()

        return [self._row_to_run(row, []) for row in rows]

    @staticmethod
    def _row_to_run(row: aiosqlite.Row, items: list[PayrollRunItem]) -> PayrollRun:
        created_at = datetime.now(UTC).replace(tzinfo=None)
        if row["created_at"]:
            try:
                created_at = datetime.fromisoformat(row["created_at"])
            except (ValueError, TypeError):
                pass

        return PayrollRun(
            id=row["id"],
            company_id=row["company_id"],
            run_date=date.fromisoformat(row["run_date"]),
            frequency=row["frequency"],
            currency=row["currency"],
            status=PayrollRunStatus(row["status"]),
            total_gross=float(row["total_gross"]),
            total_tax=float(row["total_tax"]),
            total_deductions=float(row["total_deductions"]),
            total_net=float(row["total_net"]),
            items=items,
            created_at=created_at,
        )

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> PayrollRunItem:
        return PayrollRunItem(
            id=row["id"],
            payroll_run_id=row["payroll_run_id"],
            employee_id=row["employee_id"],
            gross=float(row["gross"]),
            tax=float(row["tax"]),
            deductions=float(row["deductions"]),
            net=float(row["net"]),
        )
