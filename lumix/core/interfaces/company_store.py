"""Abstract interface for company and client lookups."""

from abc import ABC, abstractmethod

from lumix.core.entities.company import Client, Company


class ICompanyStore(ABC):
    """Interface for company records and their clients."""

    @abstractmethod
    async def get_company(self, company_id: str) -> Company | None:
        """Get company by ID."""
        pass

    @abstractmethod
    async def update_payroll_settings(self, company: Company) -> Company:
        """Update payroll frequency, currency and next run date."""
        pass

    @abstractmethod
    async def get_client(self, company_id: str, client_id: int) -> Client | None:
        """Get a client of the company."""
        pass
