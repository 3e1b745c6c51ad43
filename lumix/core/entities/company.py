"""Company, client and identity entities."""

from datetime import date
from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    """Roles a profile may hold within its company."""

    ADMIN = "admin"
    MANAGER = "manager"
    VIEWER = "viewer"


class Identity(BaseModel):
    """Identity resolved upstream by the auth provider."""

    user_id: str
    company_id: str
    role: Role
    full_name: str | None = None


class Company(BaseModel):
    """Tenant record. Every other entity belongs to exactly one company."""

    id: str
    name: str
    payroll_frequency: str | None = None
    payroll_currency: str | None = None
    payroll_next_run_date: date | None = None


class Client(BaseModel):
    """A billable client of a company."""

    id: int | None = None
    company_id: str
    name: str
    email: str | None = None
