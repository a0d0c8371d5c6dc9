"""
peerchamps.rbac

Role-based access control.

Responsibilities:
- Static role→permission table and the evaluator over it (`rbac.permissions`).
- Tenant isolation rules for tenant-scoped records (`rbac.tenancy`).
"""

from peerchamps.rbac.permissions import (
    ROLE_PERMISSIONS,
    WILDCARD,
    Permission,
    can_access,
    has_any_role,
    has_permission,
    has_role,
    permissions_for,
)

__all__ = [
    "ROLE_PERMISSIONS",
    "WILDCARD",
    "Permission",
    "can_access",
    "has_any_role",
    "has_permission",
    "has_role",
    "permissions_for",
]
