"""
peerchamps.rbac.tenancy

Tenant isolation rules.

Responsibilities:
- Decide whether a principal may touch a tenant or a tenant-scoped record.

Admins may cross tenant boundaries; every other role is confined to its own
company. A principal without a tenant assignment is confined to nothing.
"""

from __future__ import annotations

from peerchamps.auth.models import Principal


def can_access_tenant(principal: Principal | None, tenant_id: str | None) -> bool:
    if principal is None or tenant_id is None:
        return False
    if principal.is_admin:
        return True
    return principal.tenant_id is not None and principal.tenant_id == str(tenant_id)


def can_access_record(principal: Principal | None, record_tenant_id: str | None) -> bool:
    """
    Generic check for tenant-scoped rows (advocates, opportunities, reference calls).
    """
    return can_access_tenant(principal, record_tenant_id)


def can_access_user(
    principal: Principal | None,
    *,
    user_id: str,
    user_tenant_id: str | None,
) -> bool:
    if principal is None:
        return False
    if principal.is_admin or principal.id == str(user_id):
        return True
    return can_access_tenant(principal, user_tenant_id)
