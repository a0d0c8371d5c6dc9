"""
peerchamps.rbac.permissions

Permission evaluator over the static role→permission table.

Responsibilities:
- Define `Permission` and the process-wide, read-only `ROLE_PERMISSIONS` table.
- Answer `has_permission` / `has_role` / `has_any_role` / `can_access`.

All functions are pure and total: unknown roles, actions or resources are a normal
"denied" outcome, never an exception.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from peerchamps.auth.models import Role

WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class Permission:
    action: str
    resource: str

    def matches(self, action: str, resource: str) -> bool:
        return (self.action == WILDCARD or self.action == action) and (
            self.resource == WILDCARD or self.resource == resource
        )


def _grants(*pairs: tuple[str, str]) -> tuple[Permission, ...]:
    return tuple(Permission(action=a, resource=r) for a, r in pairs)


ROLE_PERMISSIONS: Mapping[Role, tuple[Permission, ...]] = MappingProxyType(
    {
        Role.admin: _grants((WILDCARD, WILDCARD)),
        Role.sales_rep: _grants(
            ("read", "advocates"),
            ("read", "opportunities"),
            ("create", "opportunities"),
            ("update", "opportunities"),
            ("delete", "opportunities"),
            ("create", "reference_calls"),
            ("read", "reference_calls"),
            ("update", "reference_calls"),
            ("read", "companies"),
            ("update", "companies"),
            ("read", "users"),
            ("create", "users"),
            ("update", "users"),
            ("read", "profile"),
            ("update", "profile"),
        ),
        Role.advocate: _grants(
            ("read", "profile"),
            ("update", "profile"),
            ("read", "reference_calls"),
            ("update", "reference_calls"),
            ("read", "availability"),
            ("update", "availability"),
            ("read", "rewards"),
        ),
    }
)


def permissions_for(role: Role | str | None) -> tuple[Permission, ...]:
    match Role.coerce(role):
        case Role.admin:
            return ROLE_PERMISSIONS[Role.admin]
        case Role.sales_rep:
            return ROLE_PERMISSIONS[Role.sales_rep]
        case Role.advocate:
            return ROLE_PERMISSIONS[Role.advocate]
        case _:
            return ()


def has_permission(role: Role | str | None, action: str, resource: str) -> bool:
    # Linear scan; the largest role has 15 entries.
    return any(p.matches(action, resource) for p in permissions_for(role))


def has_role(role: Role | str | None, expected: Role | str) -> bool:
    current = Role.coerce(role)
    return current is not None and current is Role.coerce(expected)


def has_any_role(
    role: Role | str | None, expected: Role | str | Iterable[Role | str]
) -> bool:
    current = Role.coerce(role)
    if current is None:
        return False
    # A single role name is one role, not an iterable of characters.
    if isinstance(expected, str):
        expected = (expected,)
    return any(current is Role.coerce(r) for r in expected)


def can_access(role: Role | str | None, resource: str, action: str = "read") -> bool:
    return has_permission(role, action, resource)


# --- Module Notes -----------------------------------------------------------
# Permissions are uniform across tenants. Per-tenant overrides would need a loader
# in front of `permissions_for`; the table itself stays immutable.
