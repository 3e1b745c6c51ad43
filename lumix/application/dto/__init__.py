"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from lumix.application.dto.requests import (
    CreateInvoiceRequest,
    CreatePayrollRunRequest,
    ExportInvoicesRequest,
    LineItemRequest,
    PayrollItemRequest,
    PayrollSettingsRequest,
)
from lumix.application.dto.responses import (
    CreateInvoiceResponse,
    CreatePayrollRunResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceSummaryResponse,
    PayrollRunListResponse,
    PayrollRunResponse,
    PayrollSettingsResponse,
)

__all__ = [
    # Requests
    "CreateInvoiceRequest",
    "CreatePayrollRunRequest",
    "ExportInvoicesRequest",
    "LineItemRequest",
    "PayrollItemRequest",
    "PayrollSettingsRequest",
    # Responses
    "CreateInvoiceResponse",
    "CreatePayrollRunResponse",
    "ErrorResponse",
    "HealthResponse",
    "InvoiceListResponse",
    "InvoiceSummaryResponse",
    "PayrollRunListResponse",
    "PayrollRunResponse",
    "PayrollSettingsResponse",
]
