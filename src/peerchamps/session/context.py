"""
peerchamps.session.context

Session/tenant context for one signed-in (or anonymous) caller.

Responsibilities:
- Track the session state machine:
  UNRESOLVED -> RESOLVING -> {AUTHENTICATED, ANONYMOUS}, back to RESOLVING on sign-in.
- Resolve the principal's role and tenant from the `TenantRoleStore`.
- Convert identity/role resolution failures into deny-by-default state (logged, not raised).
- Discard fetch results that complete after the principal changed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from peerchamps.auth.models import Identity, Principal, Role
from peerchamps.observability.logging import get_logger
from peerchamps.rbac.permissions import has_permission
from peerchamps.session.errors import IdentityExpired, TenantNotFound, TenantSwitchDenied
from peerchamps.session.store import IdentityProvider, Tenant, TenantRoleStore, UserRecord

log = get_logger(__name__)


class SessionState(enum.StrEnum):
    unresolved = "UNRESOLVED"
    resolving = "RESOLVING"
    authenticated = "AUTHENTICATED"
    anonymous = "ANONYMOUS"


@dataclass(frozen=True, slots=True)
class PrincipalSnapshot:
    principal: Principal | None
    loading: bool


class SessionContext:
    """
    Owns the principal/role/tenant state for a session; consumers only read it.

    Every identity change bumps `_generation`. Any fetch captures the generation it
    started under and drops its result if the generation moved on while it was
    awaiting the store, so the newest principal always wins regardless of which
    fetch completes last.
    """

    def __init__(self, store: TenantRoleStore) -> None:
        self._store = store
        self._state = SessionState.unresolved
        self._generation = 0
        self._identity: Identity | None = None
        self._principal: Principal | None = None
        self._tenant: Tenant | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state in (SessionState.unresolved, SessionState.resolving)

    @property
    def role(self) -> Role | None:
        # Cached role for synchronous gating; `get_current_role` re-fetches it.
        if self._state is not SessionState.authenticated or self._principal is None:
            return None
        return self._principal.role

    # -- read API --------------------------------------------------------------

    def get_current_principal(self) -> PrincipalSnapshot:
        if self.loading:
            return PrincipalSnapshot(principal=None, loading=True)
        return PrincipalSnapshot(principal=self._principal, loading=False)

    async def get_current_role(self) -> Role | None:
        principal = self._principal
        if self._state is not SessionState.authenticated or principal is None:
            return None

        generation = self._generation
        record = await self._lookup(principal.id)
        if generation != self._generation:
            log.info("session.stale_result_discarded", principal_id=principal.id, fetch="role")
            return None

        role = self._role_of(record)
        tenant_id = record.company_id if record is not None else None

        # A refresh may have replaced the principal while we awaited; build on the latest.
        current = self._principal
        if current is None:
            return None
        if tenant_id != current.tenant_id:
            tenant = await self._fetch_tenant(tenant_id) if tenant_id else None
            if generation != self._generation:
                log.info("session.stale_result_discarded", principal_id=principal.id, fetch="tenant")
                return None
            current = self._principal
            if current is None:
                return None
            log.info(
                "session.tenant_changed",
                principal_id=current.id,
                previous=current.tenant_id,
                current=tenant_id,
            )
            self._tenant = tenant
        if role is not current.role:
            log.info(
                "session.role_changed",
                principal_id=current.id,
                previous=current.role,
                current=role,
            )
        self._principal = replace(current, role=role, tenant_id=tenant_id)
        return role

    def get_current_tenant(self) -> Tenant | None:
        if self._state is not SessionState.authenticated:
            return None
        return self._tenant

    def has_permission(self, action: str, resource: str) -> bool:
        # While loading `role` is None, so this denies.
        return has_permission(self.role, action, resource)

    # -- identity change notifications -----------------------------------------

    async def resolve(self, provider: IdentityProvider) -> PrincipalSnapshot:
        """
        Ask the identity provider who is signed in and load role/tenant for them.
        Never raises: provider failures end in ANONYMOUS.
        """
        generation = self._begin(None, SessionState.resolving)
        try:
            identity = await provider.current_identity()
        except IdentityExpired:
            if generation == self._generation:
                self.expire()
            return self.get_current_principal()
        except Exception as e:
            log.warning("session.resolution_failed", error=str(e), error_type=type(e).__name__)
            if generation == self._generation:
                self._become_anonymous("resolution_failed")
            return self.get_current_principal()

        if generation != self._generation:
            return self.get_current_principal()
        if identity is None:
            self._become_anonymous("no_identity")
        else:
            await self.sign_in(identity)
        return self.get_current_principal()

    async def sign_in(self, identity: Identity) -> None:
        generation = self._begin(identity, SessionState.resolving)
        log.info("session.resolving", principal_id=identity.id)
        await self._load(identity, generation)

    def sign_out(self) -> None:
        self._become_anonymous("signed_out")

    def expire(self) -> None:
        self._become_anonymous("expired")

    async def refresh(self) -> PrincipalSnapshot:
        """
        Re-fetch role and tenant for the current principal. Resets any tenant switch.
        """
        identity = self._identity
        if identity is None:
            return self.get_current_principal()
        await self._load(identity, self._generation)
        return self.get_current_principal()

    async def switch_tenant(self, tenant_id: str) -> Tenant:
        principal = self._principal
        if self._state is not SessionState.authenticated or principal is None:
            raise TenantSwitchDenied("Not signed in")
        if not principal.is_admin:
            raise TenantSwitchDenied("Only administrators can switch companies")

        generation = self._generation
        try:
            tenant = await self._store.get_tenant(tenant_id)
        except ValueError as e:
            raise TenantNotFound(tenant_id) from e
        if tenant is None:
            raise TenantNotFound(tenant_id)
        if generation != self._generation:
            raise TenantSwitchDenied("Session changed during company switch")

        self._tenant = tenant
        log.info("session.tenant_switched", principal_id=principal.id, tenant_id=tenant.id)
        return tenant

    # -- internals -------------------------------------------------------------

    def _begin(self, identity: Identity | None, state: SessionState) -> int:
        # Dependent state is dropped before anything is refetched.
        self._generation += 1
        self._identity = identity
        self._principal = None
        self._tenant = None
        self._state = state
        return self._generation

    def _become_anonymous(self, reason: str) -> None:
        previous = self._principal.id if self._principal is not None else None
        self._begin(None, SessionState.anonymous)
        log.info("session.anonymous", reason=reason, previous_principal_id=previous)

    async def _load(self, identity: Identity, generation: int) -> None:
        record = await self._lookup(identity.id)
        tenant: Tenant | None = None
        if record is not None and record.company_id:
            tenant = await self._fetch_tenant(record.company_id)

        if generation != self._generation:
            log.info("session.stale_result_discarded", principal_id=identity.id, fetch="session")
            return

        self._principal = Principal(
            id=identity.id,
            email=identity.email,
            role=self._role_of(record),
            tenant_id=record.company_id if record is not None else None,
        )
        self._tenant = tenant
        self._state = SessionState.authenticated
        log.info(
            "session.authenticated",
            principal_id=identity.id,
            role=self._principal.role,
            tenant_id=self._principal.tenant_id,
        )

    async def _lookup(self, principal_id: str) -> UserRecord | None:
        try:
            record = await self._store.lookup(principal_id)
        except Exception as e:
            log.warning(
                "session.role_lookup_failed",
                principal_id=principal_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        if record is None:
            log.warning("session.role_missing", principal_id=principal_id)
        return record

    async def _fetch_tenant(self, tenant_id: str) -> Tenant | None:
        try:
            return await self._store.get_tenant(tenant_id)
        except Exception as e:
            log.warning(
                "session.tenant_lookup_failed",
                tenant_id=tenant_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    @staticmethod
    def _role_of(record: UserRecord | None) -> Role | None:
        if record is None:
            return None
        role = Role.coerce(record.role)
        if role is None:
            log.warning("session.unknown_role", principal_id=record.id, role=record.role)
        return role


# --- Module Notes -----------------------------------------------------------
# One SessionContext is built per request in the API layer (`auth.deps`); long-lived
# clients can keep one per signed-in user and feed it sign-in/sign-out events.
