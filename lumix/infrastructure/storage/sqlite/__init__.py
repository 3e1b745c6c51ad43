"""SQLite storage implementations."""

from lumix.infrastructure.storage.sqlite.company_store import SQLiteCompanyStore
from lumix.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from lumix.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from lumix.infrastructure.storage.sqlite.payroll_store import SQLitePayrollStore

# Singleton instances
_invoice_store: SQLiteInvoiceStore | None = None
_payroll_store: SQLitePayrollStore | None = None
_company_store: SQLiteCompanyStore | None = None


async def get_invoice_store() -> SQLiteInvoiceStore:
    """Get singleton invoice store instance."""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = SQLiteInvoiceStore()
    return _invoice_store


async def get_payroll_store() -> SQLitePayrollStore:
    """Get singleton payroll store instance."""
    global _payroll_store
    if _payroll_store is None:
        _payroll_store = SQLitePayrollStore()
    return _payroll_store


async def get_company_store() -> SQLiteCompanyStore:
    """Get singleton company store instance."""
    global _company_store
    if _company_store is None:
        _company_store = SQLiteCompanyStore()
    return _company_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteCompanyStore",
    "SQLiteInvoiceStore",
    "SQLitePayrollStore",
    # Factory functions
    "get_company_store",
    "get_invoice_store",
    "get_payroll_store",
]
