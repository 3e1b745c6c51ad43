"""
Document use cases.

PDF downloads: the invoice export, a single invoice and a payroll run.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from lumix.config import get_logger, get_settings
from lumix.core.entities.company import Identity
from lumix.core.entities.invoice import ExportBatch
from lumix.core.exceptions import InvoiceNotFoundError, PayrollRunNotFoundError
from lumix.core.interfaces.company_store import ICompanyStore
from lumix.core.interfaces.invoice_store import IInvoiceStore
from lumix.core.interfaces.payroll_store import IPayrollStore
from lumix.core.services.authorization import Permission, require_permission
from lumix.infrastructure.pdf import IDocumentRenderer, get_document_renderer

logger = get_logger(__name__)

EXPORT_FILENAME = "invoices-export.pdf"


@dataclass
class DocumentResult:
    """A rendered PDF ready for download."""

    pdf_bytes: bytes
    filename: str
    file_size: int


async def resolve_company_name(
    store: ICompanyStore,
    company_id: str,
    fallback: str,
) -> str:
    """Company display name, or *fallback* when the record is missing."""
    company = await store.get_company(company_id)
    if company is None or not company.name:
        return fallback
    return company.name


class _DocumentUseCase:
    """Shared store and renderer resolution for document use cases."""

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        payroll_store: IPayrollStore | None = None,
        company_store: ICompanyStore | None = None,
        renderer: IDocumentRenderer | None = None,
    ):
        self._invoice_store = invoice_store
        self._payroll_store = payroll_store
        self._company_store = company_store
        self._renderer = renderer

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from lumix.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_payroll_store(self) -> IPayrollStore:
        if self._payroll_store is None:
            from lumix.infrastructure.storage.sqlite import get_payroll_store

            self._payroll_store = await get_payroll_store()
        return self._payroll_store

    async def _get_company_name(self, company_id: str) -> str:
        if self._company_store is None:
            from lumix.infrastructure.storage.sqlite import get_company_store

            self._company_store = await get_company_store()
        return await resolve_company_name(
            self._company_store, company_id, get_settings().pdf.company_name
        )

    def _get_renderer(self) -> IDocumentRenderer:
        if self._renderer is None:
            self._renderer = get_document_renderer()
        return self._renderer


class ExportInvoicesUseCase(_DocumentUseCase):
    """
    Use case for exporting invoices as one PDF.

    Flow:
    1. Load invoice summaries (all, or the requested IDs), newest first
    2. Assemble an unpersisted export batch
    3. Render it to PDF
    """

    async def execute(
        self,
        identity: Identity,
        ids: list[int] | None = None,
        generated_at: datetime | None = None,
    ) -> DocumentResult:
        require_permission(identity, Permission.EXPORT_INVOICES)
        logger.info("invoice_export_started", company_id=identity.company_id, ids=ids)

        store = await self._get_invoice_store()
        summaries = await store.list_summaries(identity.company_id, ids=ids or None)

        batch = ExportBatch(
            company_name=await self._get_company_name(identity.company_id),
            generated_at=generated_at or datetime.now(UTC).replace(tzinfo=None),
            invoices=summaries,
        )
        pdf_bytes = self._get_renderer().render_export(batch)

        logger.info(
            "invoice_export_complete",
            company_id=identity.company_id,
            invoices=len(summaries),
            file_size=len(pdf_bytes),
        )
        return DocumentResult(
            pdf_bytes=pdf_bytes,
            filename=EXPORT_FILENAME,
            file_size=len(pdf_bytes),
        )


class RenderInvoicePdfUseCase(_DocumentUseCase):
    """Use case for downloading one invoice as PDF."""

    async def execute(self, identity: Identity, invoice_id: int) -> DocumentResult:
        require_permission(identity, Permission.VIEW_RECORDS)

        store = await self._get_invoice_store()
        invoice = await store.get_invoice(identity.company_id, invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)

        company_name = await self._get_company_name(identity.company_id)
        pdf_bytes = self._get_renderer().render_invoice(invoice, company_name)

        logger.info("invoice_pdf_created", invoice_id=invoice_id, file_size=len(pdf_bytes))
        return DocumentResult(
            pdf_bytes=pdf_bytes,
            filename=f"{invoice.invoice_number}.pdf",
            file_size=len(pdf_bytes),
        )


class RenderPayrollRunPdfUseCase(_DocumentUseCase):
    """Use case for downloading a payroll run as PDF."""

    async def execute(self, identity: Identity, run_id: int) -> DocumentResult:
        require_permission(identity, Permission.VIEW_RECORDS)

        store = await self._get_payroll_store()
        run = await store.get_run(identity.company_id, run_id)
        if run is None:
            raise PayrollRunNotFoundError(run_id)

        company_name = await self._get_company_name(identity.company_id)
        pdf_bytes = self._get_renderer().render_payroll_run(run, company_name)

        logger.info("payroll_pdf_created", run_id=run_id, file_size=len(pdf_bytes))
        return DocumentResult(
            pdf_bytes=pdf_bytes,
            filename=f"payroll-run-{run.run_date.isoformat()}.pdf",
            file_size=len(pdf_bytes),
        )
