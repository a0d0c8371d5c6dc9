"""
peerchamps.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Resolve a per-request `SessionContext` from the bearer token.
- Apply an admin company switch requested via the `X-Company-Id` header.
- Gate endpoints on permissions (`require_permission`) or roles (`require_roles`).

These are the HTTP counterparts of the permission/role gates: a denied check is a
403, an unresolved session is a 401, never a 500.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND

from peerchamps.api.deps import db_session, settings_dep
from peerchamps.auth.jwt import BearerIdentityProvider, JwtConfig
from peerchamps.auth.models import Principal, Role
from peerchamps.observability.logging import get_logger
from peerchamps.rbac.permissions import has_any_role
from peerchamps.session.context import SessionContext, SessionState
from peerchamps.session.errors import TenantNotFound, TenantSwitchDenied
from peerchamps.session.store import SqlTenantRoleStore
from peerchamps.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


async def get_session_context(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
    x_company_id: str | None = Header(default=None, alias="x-company-id"),
) -> SessionContext:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    ctx = SessionContext(SqlTenantRoleStore(session))
    provider = BearerIdentityProvider(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    snapshot = await ctx.resolve(provider)

    if ctx.state is not SessionState.authenticated or snapshot.principal is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    structlog.contextvars.bind_contextvars(
        principal_id=snapshot.principal.id,
        tenant_id=snapshot.principal.tenant_id,
    )

    if x_company_id and x_company_id != snapshot.principal.tenant_id:
        try:
            tenant = await ctx.switch_tenant(x_company_id)
        except TenantNotFound as e:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Company not found") from e
        except TenantSwitchDenied as e:
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail=str(e)) from e
        structlog.contextvars.bind_contextvars(active_tenant_id=tenant.id)
    return ctx


def get_principal(ctx: SessionContext = Depends(get_session_context)) -> Principal:
    principal = ctx.get_current_principal().principal
    if principal is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return principal


def require_permission(action: str, resource: str):
    def _dep(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
        if not ctx.has_permission(action, resource):
            log.info("authz.denied", action=action, resource=resource, role=ctx.role)
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Access denied")
        return ctx

    return _dep


def require_roles(*allowed: Role | str):
    allowed_set = frozenset(allowed)

    def _dep(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
        if not has_any_role(ctx.role, allowed_set):
            log.info("authz.denied", allowed_roles=sorted(str(r) for r in allowed_set), role=ctx.role)
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Access denied")
        return ctx

    return _dep


# --- Module Notes -----------------------------------------------------------
# FastAPI caches `get_session_context` per request, so stacking `require_permission`
# with a direct `Depends(get_session_context)` resolves the session only once.
