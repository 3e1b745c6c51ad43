"""
Domain exceptions for the Lumix application.

Every error carries a machine-readable code and a details dict. Errors raised
while dispatching an invoice also record the failing ``stage`` and, once the
invoice has been persisted, its ``invoice_id`` so callers can reconcile.
"""

from typing import Any


class LumixError(Exception):
    """Base exception for all Lumix errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    @property
    def stage(self) -> str | None:
        return self.details.get("stage")

    @property
    def invoice_id(self) -> int | None:
        return self.details.get("invoice_id")

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(LumixError):
    """Input validation failed. Never raised after a write."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidLineItemsError(ValidationError):
    """One or more line items failed their preconditions."""

    def __init__(self, problems: dict[int, str]):
        listed = ", ".join(f"#{index + 1}: {reason}" for index, reason in sorted(problems.items()))
        super().__init__(
            field="items",
            message=f"Invalid line items ({listed})",
        )
        self.code = "INVALID_LINE_ITEMS"
        self.problems = problems
        self.details["invalid_items"] = sorted(problems)


class InvalidPayrollItemsError(ValidationError):
    """One or more payroll items failed validation."""

    def __init__(self, problems: dict[int, str]):
        listed = ", ".join(f"#{index + 1}: {reason}" for index, reason in sorted(problems.items()))
        super().__init__(
            field="items",
            message=f"Invalid payroll item data ({listed})",
        )
        self.code = "INVALID_PAYROLL_ITEMS"
        self.problems = problems
        self.details["invalid_items"] = sorted(problems)


# Access Exceptions
class AuthenticationError(LumixError):
    """Request carries no usable identity."""

    def __init__(self, reason: str = "You must be signed in."):
        super().__init__(reason, code="NOT_AUTHENTICATED")


class AuthorizationError(LumixError):
    """Authenticated, but the role lacks permission for the action."""

    def __init__(self, role: str, permission: str, message: str | None = None):
        super().__init__(
            message or f"Role '{role}' does not have permission to {permission.replace('_', ' ')}.",
            code="FORBIDDEN",
            details={"role": role, "permission": permission},
        )


# Lookup Exceptions
class NotFoundError(LumixError):
    """Requested record does not exist within the caller's company."""

    pass


class InvoiceNotFoundError(NotFoundError):
    """Invoice not found in storage."""

    def __init__(self, invoice_id: int):
        super().__init__(
            f"Invoice not found: {invoice_id}",
            code="INVOICE_NOT_FOUND",
            details={"invoice_id": invoice_id},
        )


class PayrollRunNotFoundError(NotFoundError):
    """Payroll run not found in storage."""

    def __init__(self, run_id: int):
        super().__init__(
            f"Payroll run not found: {run_id}",
            code="PAYROLL_RUN_NOT_FOUND",
            details={"run_id": run_id},
        )


class ClientNotFoundError(NotFoundError):
    """Client reference does not resolve."""

    def __init__(self, client_id: int):
        super().__init__(
            f"Client not found: {client_id}",
            code="CLIENT_NOT_FOUND",
            details={"client_id": client_id},
        )


class CompanyNotFoundError(NotFoundError):
    """Company record missing."""

    def __init__(self, company_id: str):
        super().__init__(
            f"Company not found: {company_id}",
            code="COMPANY_NOT_FOUND",
            details={"company_id": company_id},
        )


# Storage Exceptions
class PersistenceError(LumixError):
    """A store operation failed."""

    def __init__(self, operation: str, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Could not {operation}: {error}",
            code="PERSISTENCE_ERROR",
            details={"operation": operation, "error": error, **(details or {})},
        )


class DuplicateInvoiceNumberError(PersistenceError):
    """Invoice number already used by the same company."""

    def __init__(self, invoice_number: str):
        super().__init__(
            "save invoice",
            f"invoice number {invoice_number} already exists",
            details={"invoice_number": invoice_number},
        )
        self.code = "DUPLICATE_INVOICE_NUMBER"
        self.invoice_number = invoice_number


# Document Exceptions
class RenderError(LumixError):
    """PDF generation faulted."""

    def __init__(self, document: str, reason: str, invoice_id: int | None = None):
        super().__init__(
            f"Could not render {document}: {reason}",
            code="RENDER_FAILED",
            details={"document": document, "reason": reason, "invoice_id": invoice_id},
        )


# Notification Exceptions
class DeliveryError(LumixError):
    """Outbound email dispatch failed."""

    def __init__(
        self,
        reason: str,
        status_code: int | None = None,
        invoice_id: int | None = None,
    ):
        super().__init__(
            reason,
            code="DELIVERY_FAILED",
            details={"status_code": status_code, "invoice_id": invoice_id},
        )


class DispatchError(LumixError):
    """An unexpected fault interrupted an invoice dispatch."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invoice dispatch failed: {reason}",
            code="DISPATCH_FAILED",
        )


class ConfigurationError(LumixError):
    """Configuration error."""

    pass
