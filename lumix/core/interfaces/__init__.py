"""Abstract interfaces between the domain and infrastructure."""

from lumix.core.interfaces.company_store import ICompanyStore
from lumix.core.interfaces.email import (
    EmailAttachment,
    EmailMessage,
    EmailReceipt,
    IEmailSender,
)
from lumix.core.interfaces.invoice_store import IInvoiceStore
from lumix.core.interfaces.payroll_store import IPayrollStore

__all__ = [
    "ICompanyStore",
    "IInvoiceStore",
    "IPayrollStore",
    "IEmailSender",
    "EmailAttachment",
    "EmailMessage",
    "EmailReceipt",
]
