"""
peerchamps.session.errors

Exceptions raised around the session context.

Only explicit user actions (tenant switching) raise to callers; identity and role
resolution problems are converted to deny-by-default state inside the context.
"""

from __future__ import annotations


class SessionError(Exception):
    pass


class IdentityExpired(SessionError):
    """Raised by identity providers when the credential has expired."""


class TenantSwitchDenied(SessionError):
    pass


class TenantNotFound(SessionError):
    def __init__(self, tenant_id: str) -> None:
        super().__init__(f"Company not found: {tenant_id}")
        self.tenant_id = tenant_id
