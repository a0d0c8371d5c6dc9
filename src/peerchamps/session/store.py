"""
peerchamps.session.store

External collaborators of the session context.

Responsibilities:
- `IdentityProvider`: who is signed in (bearer token, test double, ...).
- `TenantRoleStore`: single-row role/tenant lookup keyed by principal id.
- `SqlTenantRoleStore`: the store backed by the `users`/`companies` tables.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from peerchamps.auth.models import Identity
from peerchamps.db.repositories.companies import CompanyRepo
from peerchamps.db.repositories.users import UserRepo


@dataclass(frozen=True, slots=True)
class UserRecord:
    # `role` is the raw stored value; the context coerces it.
    id: str
    role: str | None
    company_id: str | None


@dataclass(frozen=True, slots=True)
class Tenant:
    id: str
    name: str
    subscription_tier: str
    domain: str | None = None


class IdentityProvider(Protocol):
    async def current_identity(self) -> Identity | None: ...


class TenantRoleStore(Protocol):
    async def lookup(self, principal_id: str) -> UserRecord | None: ...

    async def get_tenant(self, tenant_id: str) -> Tenant | None: ...


class SqlTenantRoleStore:
    def __init__(self, session: AsyncSession) -> None:
        self._users = UserRepo(session)
        self._companies = CompanyRepo(session)

    async def lookup(self, principal_id: str) -> UserRecord | None:
        user = await self._users.get(uuid.UUID(principal_id))
        # Deactivated users keep their row but lose their role.
        if user is None or not user.is_active:
            return None
        return UserRecord(id=str(user.id), role=user.role, company_id=str(user.company_id))

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        company = await self._companies.get(uuid.UUID(tenant_id))
        if company is None:
            return None
        return Tenant(
            id=str(company.id),
            name=company.name,
            subscription_tier=str(company.subscription_tier),
            domain=company.domain,
        )


# --- Module Notes -----------------------------------------------------------
# Malformed ids raise ValueError from `uuid.UUID`; the session context logs that as a
# lookup failure like any other store error.
