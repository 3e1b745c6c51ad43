"""Abstract interface for payroll run storage."""

from abc import ABC, abstractmethod

from lumix.core.entities.payroll import PayrollRun


class IPayrollStore(ABC):
    """Interface for payroll run persistence, always scoped by company."""

    @abstractmethod
    async def create_run(self, run: PayrollRun) -> PayrollRun:
        """Persist a run and its items atomically."""
        pass

    @abstractmethod
    async def get_run(self, company_id: str, run_id: int) -> PayrollRun | None:
        """Get payroll run by ID with items."""
        pass

    @abstractmethod
    async def list_runs(self, company_id: str, limit: int = 10) -> list[PayrollRun]:
        """List the latest runs without items."""
        pass
