"""SQLite implementation of company and client lookups."""

from datetime import date

import aiosqlite

from lumix.config import get_logger
from lumix.core.entities.company import Client, Company
from lumix.core.exceptions import CompanyNotFoundError, PersistenceError
from lumix.core.interfaces.company_store import ICompanyStore
from lumix.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteCompanyStore(ICompanyStore):
    """SQLite implementation of company storage."""

    async def get_company(self, company_id: str) -> Company | None:
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM companies WHERE id = ?",
                    (company_id,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("load company", str(e)) from e
        return self._row_to_company(row) if row else None

    async def create_company(self, company: Company) -> Company:
        """Insert a company record. Used by onboarding and fixtures."""
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO companies (
                        id, name, payroll_frequency, payroll_currency, payroll_next_run_date
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        company.id,
                        company.name,
                        company.payroll_frequency,
                        company.payroll_currency,
                        company.payroll_next_run_date.isoformat()
                        if company.payroll_next_run_date
                        else None,
                    ),
                )
        except aiosqlite.Error as e:
            raise PersistenceError("create company", str(e)) from e
        return company

    async def update_payroll_settings(self, company: Company) -> Company:
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE companies
                    SET payroll_frequency = ?, payroll_currency = ?, payroll_next_run_date = ?
                    WHERE id = ?
                    """,
                    (
                        company.payroll_frequency,
                        company.payroll_currency,
                        company.payroll_next_run_date.isoformat()
                        if company.payroll_next_run_date
                        else None,
                        company.id,
                    ),
                )
                updated = cursor.rowcount
        except aiosqlite.Error as e:
            raise PersistenceError("update payroll settings", str(e)) from e

        if not updated:
            raise CompanyNotFoundError(company.id)

        logger.info(
            "payroll_settings_updated",
            company_id=company.id,
            frequency=company.payroll_frequency,
            currency=company.payroll_currency,
        )
        return company

    async def get_client(self, company_id: str, client_id: int) -> Client | None:
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM clients WHERE id = ? AND company_id = ?",
                    (client_id, company_id),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("load client", str(e)) from e
        if row is None:
            return None
        return Client(
            id=row["id"],
            company_id=row["company_id"],
            name=row["name"],
            email=row["email"],
        )

    async def create_client(self, client: Client) -> Client:
        """Insert a client record. Used by client management and fixtures."""
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    "INSERT INTO clients (company_id, name, email) VALUES (?, ?, ?)",
                    (client.company_id, client.name, client.email),
                )
                client.id = cursor.lastrowid
        except aiosqlite.Error as e:
            raise PersistenceError("create client", str(e)) from e
        return client

    @staticmethod
    def _row_to_company(row: aiosqlite.Row) -> Company:
        next_run = None
        if row["payroll_next_run_date"]:
            try:
                next_run = date.fromisoformat(row["payroll_next_run_date"])
            except (ValueError, TypeError):
                pass
        return Company(
            id=row["id"],
            name=row["name"],
            payroll_frequency=row["payroll_frequency"],
            payroll_currency=row["payroll_currency"],
            payroll_next_run_date=next_run,
        )
