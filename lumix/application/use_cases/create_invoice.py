"""
Create Invoice Use Case.

Dispatches a new invoice through validation, money arithmetic,
persistence, PDF rendering and email notification. Every failure records
the stage that failed and, once the invoice exists, its ID, so callers can
tell "safe to resubmit" from "only retry the email".
"""

import base64
import html
import random
from dataclasses import dataclass
from enum import Enum

from lumix.application.dto.requests import CreateInvoiceRequest
from lumix.application.dto.responses import CreateInvoiceResponse
from lumix.application.use_cases.documents import resolve_company_name
from lumix.config import get_logger, get_settings
from lumix.config.settings import Settings
from lumix.core.entities.company import Identity
from lumix.core.entities.invoice import Invoice, InvoiceStatus, LineItem
from lumix.core.exceptions import (
    ClientNotFoundError,
    DispatchError,
    DuplicateInvoiceNumberError,
    LumixError,
    ValidationError,
)
from lumix.core.interfaces.company_store import ICompanyStore
from lumix.core.interfaces.email import (
    EmailAttachment,
    EmailMessage,
    EmailReceipt,
    IEmailSender,
)
from lumix.core.interfaces.invoice_store import IInvoiceStore
from lumix.core.services.authorization import Permission, require_permission
from lumix.core.services.money import compute_totals, format_amount, validate_line_items
from lumix.core.services.numbering import build_invoice_number
from lumix.infrastructure.pdf import IDocumentRenderer, get_document_renderer

logger = get_logger(__name__)


class DispatchStage(str, Enum):
    """Stages of an invoice dispatch, in order."""

    RECEIVED = "received"
    VALIDATED = "validated"
    COMPUTED = "computed"
    PERSISTED = "persisted"
    DOCUMENT_RENDERED = "document_rendered"
    NOTIFIED = "notified"
    COMPLETE = "complete"
    FAILED = "failed"


_NEXT_STAGE = {
    DispatchStage.RECEIVED: DispatchStage.VALIDATED,
    DispatchStage.VALIDATED: DispatchStage.COMPUTED,
    DispatchStage.COMPUTED: DispatchStage.PERSISTED,
    DispatchStage.PERSISTED: DispatchStage.DOCUMENT_RENDERED,
    DispatchStage.DOCUMENT_RENDERED: DispatchStage.NOTIFIED,
    DispatchStage.NOTIFIED: DispatchStage.COMPLETE,
}


@dataclass
class CreateInvoiceResult:
    """Result of a completed invoice dispatch."""

    invoice: Invoice
    stage: DispatchStage
    pdf_bytes: bytes
    receipt: EmailReceipt


def build_invoice_email(
    invoice: Invoice,
    sender: str,
    sender_name: str,
    pdf_bytes: bytes | None = None,
) -> EmailMessage:
    """Build the notification email for a new invoice."""
    amount = format_amount(invoice.total, invoice.currency)
    due_label = invoice.due_date.isoformat() if invoice.due_date else "No due date"

    text = (
        f"Hi {invoice.client_name},\n\n"
        f"An invoice has been created for {amount}.\n"
        f"Due date: {due_label}\n\n"
    )
    if invoice.notes:
        text += f"Notes: {invoice.notes}\n\n"
    text += f"Thanks,\n{sender_name}"

    notes_html = f"<p>Notes: {html.escape(invoice.notes)}</p>" if invoice.notes else ""
    body_html = (
        f"<p>Hi {html.escape(invoice.client_name)},</p>"
        f"<p>An invoice has been created for <strong>{html.escape(amount)}</strong>.</p>"
        f"<p>Due date: {due_label}</p>"
        f"{notes_html}"
        f"<p>Thanks,<br />{html.escape(sender_name)}</p>"
    )

    attachments = []
    if pdf_bytes is not None:
        attachments.append(
            EmailAttachment(
                filename=f"{invoice.invoice_number}.pdf",
                content=base64.b64encode(pdf_bytes).decode("ascii"),
            )
        )

    return EmailMessage(
        sender=sender,
        to=[invoice.client_email or ""],
        subject=f"Invoice {invoice.invoice_number} from {sender_name}",
        text=text,
        html=body_html,
        attachments=attachments,
    )


class CreateInvoiceUseCase:
    """
    Use case for creating and sending an invoice.

    Flow:
    1. Check permission and validate the request (no side effects)
    2. Compute line and invoice totals
    3. Persist header and items atomically, retrying on number collision
    4. Render the invoice PDF
    5. Email the client with the PDF attached
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        company_store: ICompanyStore | None = None,
        renderer: IDocumentRenderer | None = None,
        email_sender: IEmailSender | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self._invoice_store = invoice_store
        self._company_store = company_store
        self._renderer = renderer
        self._email_sender = email_sender
        self._settings = settings or get_settings()
        self._rng = rng

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from lumix.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_company_store(self) -> ICompanyStore:
        if self._company_store is None:
            from lumix.infrastructure.storage.sqlite import get_company_store

            self._company_store = await get_company_store()
        return self._company_store

    def _get_renderer(self) -> IDocumentRenderer:
        if self._renderer is None:
            self._renderer = get_document_renderer()
        return self._renderer

    def _get_email_sender(self) -> IEmailSender:
        if self._email_sender is None:
            from lumix.infrastructure.email import get_email_sender

            self._email_sender = get_email_sender()
        return self._email_sender

    async def execute(
        self,
        identity: Identity,
        request: CreateInvoiceRequest,
    ) -> CreateInvoiceResult:
        """
        Create, persist, render and send an invoice.

        Raises:
            AuthorizationError: If the role may not create invoices.
            ValidationError: On invalid input; nothing has been written.
            NotFoundError: If the referenced client does not exist.
            PersistenceError: If the invoice could not be saved.
            RenderError: If the PDF failed; the invoice exists.
            DeliveryError: If the email failed; the invoice exists.
            DispatchError: On any other fault, tagged like the errors above.
        """
        stage = DispatchStage.RECEIVED
        invoice: Invoice | None = None
        logger.info(
            "invoice_dispatch_started",
            company_id=identity.company_id,
            user_id=identity.user_id,
            items=len(request.items),
        )

        try:
            require_permission(identity, Permission.CREATE_INVOICE)
            client_id, client_name, client_email = await self._resolve_client(identity, request)
            currency = self._resolve_currency(request.currency)
            items = [
                LineItem(
                    description=item.description.strip(),
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    tax_rate=item.tax_rate,
                    discount_rate=item.discount_rate,
                )
                for item in request.items
            ]
            validate_line_items(items)
            stage = self._advance(stage)

            totals = compute_totals(items)
            for item, line in zip(items, totals.lines):
                item.line_total = line.line_total
            stage = self._advance(stage)

            draft = Invoice(
                company_id=identity.company_id,
                invoice_number="",
                client_id=client_id,
                client_name=client_name,
                client_email=client_email,
                currency=currency,
                items=items,
                due_date=request.due_date,
                notes=request.notes.strip() if request.notes else None,
                subtotal=totals.subtotal,
                discount_total=totals.discount_total,
                tax_total=totals.tax_total,
                total=totals.total,
                status=InvoiceStatus.PENDING,
            )
            invoice = await self._persist(draft)
            stage = self._advance(stage, invoice)

            company_name = await resolve_company_name(
                await self._get_company_store(),
                identity.company_id,
                self._settings.pdf.company_name,
            )
            pdf_bytes = self._get_renderer().render_invoice(invoice, company_name)
            stage = self._advance(stage, invoice)

            message = build_invoice_email(
                invoice,
                sender=self._settings.email.sender,
                sender_name=identity.full_name or company_name,
                pdf_bytes=pdf_bytes if self._settings.email.attach_pdf else None,
            )
            receipt = await self._get_email_sender().send(message)
            stage = self._advance(stage, invoice)

            # Nothing left that can fail
            stage = self._advance(stage, invoice)
        except LumixError as e:
            self._record_failure(e, stage, invoice)
            raise
        except Exception as e:
            error = DispatchError(str(e) or e.__class__.__name__)
            self._record_failure(error, stage, invoice)
            raise error from e

        logger.info(
            "invoice_dispatch_complete",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            total=invoice.total,
            email_id=receipt.message_id,
        )
        return CreateInvoiceResult(
            invoice=invoice,
            stage=stage,
            pdf_bytes=pdf_bytes,
            receipt=receipt,
        )

    @staticmethod
    def _record_failure(error: LumixError, stage: DispatchStage, invoice: Invoice | None) -> None:
        """Tag the error with the stage that failed and any saved invoice ID."""
        failed_stage = _NEXT_STAGE.get(stage, stage)
        error.details["stage"] = failed_stage.value
        if invoice is not None:
            error.details["invoice_id"] = invoice.id
        log = logger.error if isinstance(error, DispatchError) else logger.warning
        log(
            "invoice_dispatch_failed",
            stage=failed_stage.value,
            error_code=error.code,
            error=error.message,
            invoice_id=invoice.id if invoice else None,
        )

    @staticmethod
    def _advance(stage: DispatchStage, invoice: Invoice | None = None) -> DispatchStage:
        next_stage = _NEXT_STAGE[stage]
        logger.debug(
            "invoice_dispatch_stage",
            stage=next_stage.value,
            invoice_id=invoice.id if invoice else None,
        )
        return next_stage

    async def _resolve_client(
        self,
        identity: Identity,
        request: CreateInvoiceRequest,
    ) -> tuple[int | None, str, str]:
        """Return (client_id, name, email) from a client ID or free-text fields."""
        if request.client_id is not None:
            store = await self._get_company_store()
            client = await store.get_client(identity.company_id, request.client_id)
            if client is None:
                raise ClientNotFoundError(request.client_id)
            client_id, name, email = client.id, client.name, client.email
        else:
            client_id, name, email = None, request.client_name, request.client_email

        name = (name or "").strip()
        email = (email or "").strip()
        if not name:
            raise ValidationError("client_name", "Client name is required.")
        if not email:
            raise ValidationError("client_email", "Client email is required.")
        if "@" not in email:
            raise ValidationError("client_email", "Client email is invalid.", email)
        return client_id, name, email

    def _resolve_currency(self, currency: str | None) -> str:
        code = (currency or self._settings.invoicing.default_currency).strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValidationError("currency", "Currency must be a 3-letter code.", currency)
        return code

    async def _persist(self, draft: Invoice) -> Invoice:
        """Save with a fresh invoice number per attempt until one is free."""
        store = await self._get_invoice_store()
        invoicing = self._settings.invoicing
        attempts = max(1, invoicing.number_attempts)

        last_error: DuplicateInvoiceNumberError | None = None
        for attempt in range(1, attempts + 1):
            candidate = draft.model_copy(
                update={
                    "invoice_number": build_invoice_number(
                        rng=self._rng, prefix=invoicing.number_prefix
                    ),
                    "items": [item.model_copy() for item in draft.items],
                }
            )
            try:
                return await store.create_invoice(candidate)
            except DuplicateInvoiceNumberError as e:
                last_error = e
                logger.warning(
                    "invoice_number_collision",
                    invoice_number=candidate.invoice_number,
                    attempt=attempt,
                    max_attempts=attempts,
                )

        raise last_error

    @staticmethod
    def to_response(result: CreateInvoiceResult) -> CreateInvoiceResponse:
        """Convert result to API response."""
        return CreateInvoiceResponse(
            invoice_id=result.invoice.id,
            invoice_number=result.invoice.invoice_number,
            status=result.invoice.status.value,
            stage=result.stage.value,
            total=result.invoice.total,
            currency=result.invoice.currency,
            email_id=result.receipt.message_id,
        )
