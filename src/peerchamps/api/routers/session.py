"""
peerchamps.api.routers.session

Session introspection for the signed-in caller.

Responsibilities:
- Report principal, role, active tenant and granted permissions.
- Answer ad-hoc permission checks (the API form of a permission gate).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from peerchamps.auth.deps import get_principal, get_session_context
from peerchamps.auth.models import Role
from peerchamps.rbac.permissions import permissions_for
from peerchamps.session.context import SessionContext
from peerchamps.session.store import Tenant

router = APIRouter(prefix="/v1/session", tags=["session"])


class PermissionOut(BaseModel):
    action: str
    resource: str


class TenantOut(BaseModel):
    id: str
    name: str
    subscription_tier: str
    domain: str | None = None

    @classmethod
    def from_tenant(cls, tenant: Tenant | None) -> TenantOut | None:
        if tenant is None:
            return None
        return cls(
            id=tenant.id,
            name=tenant.name,
            subscription_tier=tenant.subscription_tier,
            domain=tenant.domain,
        )


class SessionResponse(BaseModel):
    state: str
    principal_id: str
    email: str | None
    role: Role | None
    tenant_id: str | None
    active_tenant: TenantOut | None
    permissions: list[PermissionOut]


class PermissionCheckResponse(BaseModel):
    action: str
    resource: str
    allowed: bool


def _describe(ctx: SessionContext) -> SessionResponse:
    principal = get_principal(ctx)
    return SessionResponse(
        state=str(ctx.state),
        principal_id=principal.id,
        email=principal.email,
        role=principal.role,
        tenant_id=principal.tenant_id,
        active_tenant=TenantOut.from_tenant(ctx.get_current_tenant()),
        permissions=[
            PermissionOut(action=p.action, resource=p.resource)
            for p in permissions_for(principal.role)
        ],
    )


@router.get("", response_model=SessionResponse)
async def get_session(ctx: SessionContext = Depends(get_session_context)) -> SessionResponse:
    return _describe(ctx)


@router.get("/permissions", response_model=PermissionCheckResponse)
async def check_permission(
    action: str = Query(min_length=1, max_length=64),
    resource: str = Query(min_length=1, max_length=64),
    ctx: SessionContext = Depends(get_session_context),
) -> PermissionCheckResponse:
    return PermissionCheckResponse(
        action=action,
        resource=resource,
        allowed=ctx.has_permission(action, resource),
    )

