"""
Create Payroll Run Use Case.

Validates per-employee entries, aggregates net pay and totals, and saves
a draft run with its items.
"""

from lumix.application.dto.requests import CreatePayrollRunRequest
from lumix.application.dto.responses import CreatePayrollRunResponse
from lumix.config import get_logger
from lumix.core.entities.company import Identity
from lumix.core.entities.payroll import PayrollRun, PayrollRunItem, PayrollRunStatus
from lumix.core.exceptions import ValidationError
from lumix.core.interfaces.payroll_store import IPayrollStore
from lumix.core.services.authorization import Permission, require_permission
from lumix.core.services.payroll_aggregator import aggregate_payroll

logger = get_logger(__name__)


class CreatePayrollRunUseCase:
    """
    Use case for creating a draft payroll run.

    Flow:
    1. Check permission and run details
    2. Aggregate items (whole batch rejected on any invalid item)
    3. Persist run and items atomically
    """

    def __init__(self, payroll_store: IPayrollStore | None = None):
        self._payroll_store = payroll_store

    async def _get_payroll_store(self) -> IPayrollStore:
        if self._payroll_store is None:
            from lumix.infrastructure.storage.sqlite import get_payroll_store

            self._payroll_store = await get_payroll_store()
        return self._payroll_store

    async def execute(
        self,
        identity: Identity,
        request: CreatePayrollRunRequest,
    ) -> PayrollRun:
        """
        Create a payroll run.

        Raises:
            AuthorizationError: If the role may not create payroll runs.
            ValidationError: On missing details or invalid items.
            PersistenceError: If the run could not be saved.
        """
        require_permission(identity, Permission.CREATE_PAYROLL_RUN)

        frequency = request.frequency.strip()
        currency = request.currency.strip().upper()
        if not frequency or not currency:
            raise ValidationError("run", "Missing payroll run details.")

        totals = aggregate_payroll(
            [
                PayrollRunItem(
                    employee_id=item.employee_id.strip(),
                    gross=item.gross,
                    tax=item.tax,
                    deductions=item.deductions,
                )
                for item in request.items
            ]
        )

        run = PayrollRun(
            company_id=identity.company_id,
            run_date=request.run_date,
            frequency=frequency,
            currency=currency,
            status=PayrollRunStatus.DRAFT,
            items=totals.items,
            total_gross=totals.total_gross,
            total_tax=totals.total_tax,
            total_deductions=totals.total_deductions,
            total_net=totals.total_net,
        )

        store = await self._get_payroll_store()
        run = await store.create_run(run)

        logger.info(
            "create_payroll_run_complete",
            run_id=run.id,
            company_id=identity.company_id,
            employees=len(run.items),
            total_net=run.total_net,
        )
        return run

    @staticmethod
    def to_response(run: PayrollRun) -> CreatePayrollRunResponse:
        """Convert result to API response."""
        return CreatePayrollRunResponse(
            run_id=run.id,
            status=run.status.value,
            total_gross=run.total_gross,
            total_tax=run.total_tax,
            total_deductions=run.total_deductions,
            total_net=run.total_net,
        )
