"""
Role-based authorization.

One guard for every mutating operation: the identity's role is checked
against a permission table and a typed result is returned.
"""

from dataclasses import dataclass
from enum import Enum

from lumix.core.entities.company import Identity, Role
from lumix.core.exceptions import AuthorizationError


class Permission(str, Enum):
    """Actions gated by role."""

    VIEW_RECORDS = "view_records"
    CREATE_INVOICE = "create_invoices"
    EXPORT_INVOICES = "export_invoices"
    CREATE_PAYROLL_RUN = "create_payroll_runs"
    UPDATE_PAYROLL_SETTINGS = "update_payroll_settings"


_WRITE_ACCESS = {
    Permission.VIEW_RECORDS,
    Permission.CREATE_INVOICE,
    Permission.EXPORT_INVOICES,
    Permission.CREATE_PAYROLL_RUN,
    Permission.UPDATE_PAYROLL_SETTINGS,
}

ROLE_PERMISSIONS: dict[Role, set[Permission]] = {
    Role.ADMIN: _WRITE_ACCESS,
    Role.MANAGER: _WRITE_ACCESS,
    Role.VIEWER: {Permission.VIEW_RECORDS},
}


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of a permission check."""

    allowed: bool
    identity: Identity
    permission: Permission
    reason: str | None = None


def authorize(identity: Identity, permission: Permission) -> AuthorizationResult:
    """Check whether *identity* may perform *permission*."""
    if permission in ROLE_PERMISSIONS.get(identity.role, set()):
        return AuthorizationResult(allowed=True, identity=identity, permission=permission)
    return AuthorizationResult(
        allowed=False,
        identity=identity,
        permission=permission,
        reason=f"You do not have permission to {permission.value.replace('_', ' ')}.",
    )


def require_permission(identity: Identity, permission: Permission) -> Identity:
    """Return *identity* if allowed, otherwise raise AuthorizationError."""
    result = authorize(identity, permission)
    if not result.allowed:
        raise AuthorizationError(identity.role.value, permission.value, result.reason)
    return identity
