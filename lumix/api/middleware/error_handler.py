"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
- stage / invoice_id: where an invoice dispatch failed, and what it created
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from lumix.application.dto.responses import ErrorResponse
from lumix.config import get_logger
from lumix.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    DeliveryError,
    LumixError,
    NotFoundError,
    PersistenceError,
    RenderError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    RenderError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    DeliveryError: status.HTTP_502_BAD_GATEWAY,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Hint messages per error code
HINT_MAP: dict[str, str] = {
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "INVALID_LINE_ITEMS": "Every line needs a description, a quantity above 0 and a unit price of 0 or more.",
    "INVALID_PAYROLL_ITEMS": "Every payroll item needs an employee and a finite gross amount.",
    "NOT_AUTHENTICATED": "Sign in and send the identity headers.",
    "FORBIDDEN": "Ask an admin or manager to perform this action.",
    "INVOICE_NOT_FOUND": "Check the invoice ID and try GET /api/invoices to list available invoices.",
    "PAYROLL_RUN_NOT_FOUND": "Check the run ID and try GET /api/payroll/runs to list recent runs.",
    "CLIENT_NOT_FOUND": "Check the client ID or send client_name and client_email instead.",
    "COMPANY_NOT_FOUND": "Complete company setup before using payroll features.",
    "PERSISTENCE_ERROR": "Nothing was saved. It is safe to resubmit.",
    "DUPLICATE_INVOICE_NUMBER": "Nothing was saved. It is safe to resubmit.",
    "RENDER_FAILED": "The document could not be generated. Retry the download later.",
    "DELIVERY_FAILED": "The email provider failed. Retry later.",
    "DISPATCH_FAILED": "Nothing was saved. It is safe to resubmit.",
}

# Hints once an invoice exists; resubmitting would create a second one
SAVED_INVOICE_HINTS: dict[str, str] = {
    "RENDER_FAILED": "The invoice was saved. Download its PDF later instead of resubmitting.",
    "DELIVERY_FAILED": "The invoice was saved. Retry the email only; do not resubmit.",
}
SAVED_INVOICE_DEFAULT_HINT = "The invoice was saved; do not resubmit. Check it with GET /api/invoices."

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    401: "Sign in and retry.",
    403: "Your role does not allow this action.",
    404: "The requested resource was not found. Verify the ID.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
    502: "An upstream service failed. Retry later.",
}


def _get_hint(error_code: str, status_code: int, invoice_id: int | None = None) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    if invoice_id is not None and status_code >= 500:
        return SAVED_INVOICE_HINTS.get(error_code, SAVED_INVOICE_DEFAULT_HINT)
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert exception to standardized JSON response."""
    status_code = _status_for(exc)

    # Prefer LumixError.code, fall back to class name
    if isinstance(exc, LumixError):
        error_code = exc.code
        details = exc.details
    else:
        error_code = exc.__class__.__name__
        details = {}

    request_id = getattr(request.state, "request_id", None)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=request_id,
        path=request.url.path,
        status=status_code,
        error_type=error_code,
        error=str(exc),
        stage=details.get("stage"),
        invoice_id=details.get("invoice_id"),
        traceback=traceback.format_exc() if status_code >= 500 else None,
    )

    field = details.get("field")
    error_response = ErrorResponse(
        error_code=error_code,
        message=str(exc),
        hint=_get_hint(error_code, status_code, details.get("invoice_id")),
        detail=f"field: {field}" if field else None,
        path=request.url.path,
        stage=details.get("stage"),
        invoice_id=details.get("invoice_id"),
    )

    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions to standardized JSON error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Handle request with error catching."""
        try:
            return await call_next(request)

        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(LumixError)
    async def lumix_exception_handler(request: Request, exc: LumixError) -> JSONResponse:
        """Handle domain errors raised by routes and use cases."""
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = _infer_error_code(exc.status_code)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=exc.detail or "An error occurred",
                hint=_get_hint(error_code, exc.status_code),
                path=request.url.path,
            ).model_dump(mode="json"),
            headers=getattr(exc, "headers", None),
        )


def _infer_error_code(status_code: int) -> str:
    """Infer a machine-readable error code from an HTTP status."""
    if status_code == 404:
        return "NOT_FOUND"
    if status_code == 405:
        return "METHOD_NOT_ALLOWED"
    if status_code == 400:
        return "BAD_REQUEST"
    if status_code == 422:
        return "UNPROCESSABLE_ENTITY"
    return "HTTP_ERROR"
