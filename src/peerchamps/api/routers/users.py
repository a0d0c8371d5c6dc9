"""
peerchamps.api.routers.users

User reads and admin role assignment.

Responsibilities:
- Read a user (own profile, or same-tenant users for roles that may read users).
- Let admins change a user's role; sessions pick it up on their next resolution.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND

from peerchamps.api.deps import db_session
from peerchamps.auth.deps import get_principal, get_session_context, require_roles
from peerchamps.auth.models import Principal, Role
from peerchamps.db.models import User
from peerchamps.db.repositories.users import UserRepo
from peerchamps.observability.logging import get_logger
from peerchamps.rbac.tenancy import can_access_user
from peerchamps.session.context import SessionContext

log = get_logger(__name__)

router = APIRouter(prefix="/v1/users", tags=["users"])


class UserOut(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    email: str
    role: Role | None
    first_name: str | None
    last_name: str | None
    is_active: bool

    @classmethod
    def from_row(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            company_id=user.company_id,
            email=user.email,
            role=user.parsed_role,
            first_name=user.first_name,
            last_name=user.last_name,
            is_active=user.is_active,
        )


class RoleUpdateRequest(BaseModel):
    role: Role


async def _load_visible_user(
    user_id: uuid.UUID, principal: Principal, session: AsyncSession
) -> User:
    user = await UserRepo(session).get(user_id)
    if user is None or not can_access_user(
        principal, user_id=str(user.id), user_tenant_id=str(user.company_id)
    ):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: uuid.UUID,
    ctx: SessionContext = Depends(get_session_context),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> UserOut:
    # Own record is a "profile" read; anyone else's is a "users" read.
    resource = "profile" if principal.id == str(user_id) else "users"
    if not ctx.has_permission("read", resource):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Access denied")
    user = await _load_visible_user(user_id, principal, session)
    return UserOut.from_row(user)


@router.put(
    "/{user_id}/role",
    response_model=UserOut,
    dependencies=[Depends(require_roles(Role.admin))],
)
async def set_user_role(
    user_id: uuid.UUID,
    body: RoleUpdateRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> UserOut:
    users = UserRepo(session)
    if await users.get(user_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    await users.set_role(user_id, body.role)
    await session.commit()
    log.info("users.role_updated", user_id=str(user_id), role=body.role, actor=principal.id)

    user = await users.get(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return UserOut.from_row(user)
