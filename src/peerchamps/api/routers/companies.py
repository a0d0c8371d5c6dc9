"""
peerchamps.api.routers.companies

Tenant-scoped company reads.

Responsibilities:
- Return the caller's active company and any company they may see.
- List a company's users.

Non-admins asking for another tenant's company get a 404, same as a missing one.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from peerchamps.api.deps import db_session
from peerchamps.api.routers.users import UserOut
from peerchamps.auth.deps import get_principal, get_session_context, require_permission
from peerchamps.auth.models import Principal
from peerchamps.db.models import Company
from peerchamps.db.repositories.companies import CompanyRepo
from peerchamps.db.repositories.users import UserRepo
from peerchamps.rbac.tenancy import can_access_tenant
from peerchamps.session.context import SessionContext

router = APIRouter(prefix="/v1/companies", tags=["companies"])


class CompanyOut(BaseModel):
    id: uuid.UUID
    name: str
    domain: str | None
    subscription_tier: str

    @classmethod
    def from_row(cls, company: Company) -> CompanyOut:
        return cls(
            id=company.id,
            name=company.name,
            domain=company.domain,
            subscription_tier=str(company.subscription_tier),
        )


async def _load_visible_company(
    company_id: uuid.UUID, principal: Principal, session: AsyncSession
) -> Company:
    if not can_access_tenant(principal, str(company_id)):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Company not found")
    company = await CompanyRepo(session).get(company_id)
    if company is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Company not found")
    return company


@router.get(
    "/current",
    response_model=CompanyOut,
    dependencies=[Depends(require_permission("read", "companies"))],
)
async def get_current_company(
    ctx: SessionContext = Depends(get_session_context),
    session: AsyncSession = Depends(db_session),
) -> CompanyOut:
    tenant = ctx.get_current_tenant()
    if tenant is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="No company assigned")
    company = await CompanyRepo(session).get(uuid.UUID(tenant.id))
    if company is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Company not found")
    return CompanyOut.from_row(company)


@router.get(
    "/{company_id}",
    response_model=CompanyOut,
    dependencies=[Depends(require_permission("read", "companies"))],
)
async def get_company(
    company_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> CompanyOut:
    company = await _load_visible_company(company_id, principal, session)
    return CompanyOut.from_row(company)


@router.get(
    "/{company_id}/users",
    response_model=list[UserOut],
    dependencies=[Depends(require_permission("read", "users"))],
)
async def list_company_users(
    company_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[UserOut]:
    await _load_visible_company(company_id, principal, session)
    users = await UserRepo(session).list_for_company(company_id)
    return [UserOut.from_row(u) for u in users]
