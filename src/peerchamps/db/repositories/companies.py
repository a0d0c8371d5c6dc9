from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from peerchamps.db.models import Company, SubscriptionTier


class CompanyRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        domain: str | None = None,
        subscription_tier: SubscriptionTier = SubscriptionTier.professional,
        settings: dict[str, Any] | None = None,
    ) -> Company:
        company = Company(
            name=name,
            domain=domain,
            subscription_tier=subscription_tier,
            settings=settings or {},
        )
        self._session.add(company)
        await self._session.flush()
        return company

    async def get(self, company_id: uuid.UUID) -> Company | None:
        return await self._session.get(Company, company_id)
