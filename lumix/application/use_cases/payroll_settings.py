"""
Payroll settings and run listing use cases.
"""

from lumix.application.dto.requests import PayrollSettingsRequest
from lumix.application.dto.responses import (
    PayrollRunListResponse,
    PayrollRunResponse,
    PayrollSettingsResponse,
)
from lumix.config import get_logger
from lumix.core.entities.company import Company, Identity
from lumix.core.entities.payroll import PayrollRun
from lumix.core.exceptions import CompanyNotFoundError, ValidationError
from lumix.core.interfaces.company_store import ICompanyStore
from lumix.core.interfaces.payroll_store import IPayrollStore
from lumix.core.services.authorization import Permission, require_permission

logger = get_logger(__name__)

# Runs shown on the payroll overview
RECENT_RUNS_LIMIT = 10

FLEXIBLE_FREQUENCY = "flexible"


class PayrollSettingsUseCase:
    """Read and update a company's payroll frequency, currency and next run date."""

    def __init__(self, company_store: ICompanyStore | None = None):
        self._company_store = company_store

    async def _get_company_store(self) -> ICompanyStore:
        if self._company_store is None:
            from lumix.infrastructure.storage.sqlite import get_company_store

            self._company_store = await get_company_store()
        return self._company_store

    async def _load(self, company_id: str) -> Company:
        store = await self._get_company_store()
        company = await store.get_company(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    async def get(self, identity: Identity) -> Company:
        require_permission(identity, Permission.VIEW_RECORDS)
        return await self._load(identity.company_id)

    async def update(self, identity: Identity, request: PayrollSettingsRequest) -> Company:
        """
        Update payroll settings.

        Raises:
            AuthorizationError: If the role may not change settings.
            ValidationError: If a flexible schedule has no next run date.
            CompanyNotFoundError: If the company record is missing.
        """
        require_permission(identity, Permission.UPDATE_PAYROLL_SETTINGS)

        frequency = request.payroll_frequency.strip()
        currency = request.payroll_currency.strip().upper()
        if not frequency or not currency:
            raise ValidationError("payroll_settings", "Missing payroll settings.")
        if frequency == FLEXIBLE_FREQUENCY and request.payroll_next_run_date is None:
            raise ValidationError(
                "payroll_next_run_date",
                "Next pay run date is required for flexible frequency.",
            )

        company = await self._load(identity.company_id)
        updated = company.model_copy(
            update={
                "payroll_frequency": frequency,
                "payroll_currency": currency,
                "payroll_next_run_date": request.payroll_next_run_date,
            }
        )
        store = await self._get_company_store()
        return await store.update_payroll_settings(updated)

    @staticmethod
    def to_response(company: Company) -> PayrollSettingsResponse:
        return PayrollSettingsResponse(
            payroll_frequency=company.payroll_frequency,
            payroll_currency=company.payroll_currency,
            payroll_next_run_date=company.payroll_next_run_date,
        )


class ListPayrollRunsUseCase:
    """List the latest payroll runs of a company, newest first."""

    def __init__(self, payroll_store: IPayrollStore | None = None):
        self._payroll_store = payroll_store

    async def _get_payroll_store(self) -> IPayrollStore:
        if self._payroll_store is None:
            from lumix.infrastructure.storage.sqlite import get_payroll_store

            self._payroll_store = await get_payroll_store()
        return self._payroll_store

    async def execute(self, identity: Identity) -> list[PayrollRun]:
        require_permission(identity, Permission.VIEW_RECORDS)
        store = await self._get_payroll_store()
        return await store.list_runs(identity.company_id, limit=RECENT_RUNS_LIMIT)

    @staticmethod
    def to_response(runs: list[PayrollRun]) -> PayrollRunListResponse:
        return PayrollRunListResponse(
            runs=[
                PayrollRunResponse(
                    id=run.id,
                    run_date=run.run_date,
                    frequency=run.frequency,
                    currency=run.currency,
                    status=run.status.value,
                    total_gross=run.total_gross,
                    total_tax=run.total_tax,
                    total_deductions=run.total_deductions,
                    total_net=run.total_net,
                    created_at=run.created_at,
                )
                for run in runs
            ]
        )
