"""
peerchamps.db.repositories.users

Repository for `User` rows.

Responsibilities:
- Single-row lookup by principal id (the role/tenant query).
- Tenant-scoped listing and role updates.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peerchamps.auth.models import Role
from peerchamps.db.models import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        company_id: uuid.UUID,
        email: str,
        role: Role,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        user = User(
            company_id=company_id,
            email=email.lower(),
            role=role.value,
            first_name=first_name,
            last_name=last_name,
            profile={},
            is_active=True,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def list_for_company(self, company_id: uuid.UUID, *, limit: int = 200) -> list[User]:
        stmt = (
            select(User)
            .where(User.company_id == company_id)
            .order_by(User.email)
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def set_role(self, user_id: uuid.UUID, role: Role) -> None:
        user = await self._session.get(User, user_id, with_for_update=True)
        if user is None:
            return
        user.role = role.value
        user.updated_at = datetime.utcnow()


# --- Module Notes -----------------------------------------------------------
# `users.id` matches the identity provider's subject; there is at most one row per
# principal.
