"""
tests.test_session_context

Session/tenant context against in-memory stores.

Responsibilities:
- State machine transitions and the loading contract.
- Deny-by-default on missing/failed role lookups.
- Stale fetch results discarded after a principal swap.
"""

from __future__ import annotations

import asyncio

import pytest

from peerchamps.auth.models import Identity, Role
from peerchamps.session.context import SessionContext, SessionState
from peerchamps.session.errors import IdentityExpired, TenantNotFound, TenantSwitchDenied
from peerchamps.session.store import Tenant, UserRecord

ACME = Tenant(id="t-acme", name="Acme", subscription_tier="professional", domain="acme.test")
GLOBEX = Tenant(id="t-globex", name="Globex", subscription_tier="enterprise")


class FakeStore:
    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {
            "rep": UserRecord(id="rep", role="sales_rep", company_id=ACME.id),
            "adv": UserRecord(id="adv", role="advocate", company_id=ACME.id),
            "root": UserRecord(id="root", role="admin", company_id=ACME.id),
            "weird": UserRecord(id="weird", role="superuser", company_id=ACME.id),
            "loner": UserRecord(id="loner", role="advocate", company_id=None),
        }
        self.tenants = {ACME.id: ACME, GLOBEX.id: GLOBEX}
        self.lookups = 0

    async def lookup(self, principal_id: str) -> UserRecord | None:
        self.lookups += 1
        return self.users.get(principal_id)

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        return self.tenants.get(tenant_id)


class BrokenStore(FakeStore):
    async def lookup(self, principal_id: str) -> UserRecord | None:
        raise ConnectionError("store unreachable")


class GatedStore(FakeStore):
    """Blocks lookups for one principal until `release` is set."""

    def __init__(self, blocked: str) -> None:
        super().__init__()
        self.blocked = blocked
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def lookup(self, principal_id: str) -> UserRecord | None:
        if principal_id == self.blocked:
            self.entered.set()
            await self.release.wait()
        return await super().lookup(principal_id)


class StaticProvider:
    def __init__(self, identity: Identity | None = None, error: Exception | None = None) -> None:
        self._identity = identity
        self._error = error

    async def current_identity(self) -> Identity | None:
        if self._error is not None:
            raise self._error
        return self._identity


def test_new_context_is_loading_and_denies() -> None:
    ctx = SessionContext(FakeStore())
    snap = ctx.get_current_principal()
    assert ctx.state is SessionState.unresolved
    assert snap.loading is True and snap.principal is None
    assert ctx.get_current_tenant() is None
    assert ctx.has_permission("read", "profile") is False


@pytest.mark.asyncio
async def test_sign_in_then_sign_out() -> None:
    ctx = SessionContext(FakeStore())

    await ctx.sign_in(Identity(id="rep", email="rep@acme.test"))
    snap = ctx.get_current_principal()
    assert ctx.state is SessionState.authenticated
    assert snap.loading is False
    assert snap.principal is not None and snap.principal.email == "rep@acme.test"
    assert ctx.role is Role.sales_rep
    assert ctx.has_permission("create", "opportunities")
    assert ctx.get_current_tenant() == ACME

    ctx.sign_out()
    assert ctx.state is SessionState.anonymous
    assert ctx.get_current_principal().principal is None
    assert ctx.get_current_principal().loading is False
    assert await ctx.get_current_role() is None
    assert ctx.get_current_tenant() is None
    for action, resource in [("create", "opportunities"), ("read", "profile"), ("*", "*")]:
        assert ctx.has_permission(action, resource) is False


@pytest.mark.asyncio
async def test_missing_role_row_yields_none_without_raising() -> None:
    ctx = SessionContext(FakeStore())
    await ctx.sign_in(Identity(id="nobody"))

    assert ctx.state is SessionState.authenticated
    assert ctx.get_current_principal().principal is not None
    assert await ctx.get_current_role() is None
    assert ctx.get_current_tenant() is None
    assert ctx.has_permission("read", "profile") is False


@pytest.mark.asyncio
async def test_role_lookup_failure_is_swallowed() -> None:
    ctx = SessionContext(BrokenStore())
    await ctx.sign_in(Identity(id="rep"))

    assert await ctx.get_current_role() is None
    assert ctx.has_permission("read", "profile") is False


@pytest.mark.asyncio
async def test_unknown_stored_role_is_treated_as_no_role() -> None:
    ctx = SessionContext(FakeStore())
    await ctx.sign_in(Identity(id="weird"))
    assert await ctx.get_current_role() is None
    assert ctx.has_permission("read", "profile") is False


@pytest.mark.asyncio
async def test_principal_without_tenant_assignment() -> None:
    ctx = SessionContext(FakeStore())
    await ctx.sign_in(Identity(id="loner"))
    assert ctx.role is Role.advocate
    assert ctx.get_current_tenant() is None


@pytest.mark.asyncio
async def test_role_is_refetched_not_cached() -> None:
    store = FakeStore()
    ctx = SessionContext(store)
    await ctx.sign_in(Identity(id="rep"))
    assert ctx.has_permission("delete", "opportunities")

    store.users["rep"] = UserRecord(id="rep", role="advocate", company_id=ACME.id)
    assert await ctx.get_current_role() is Role.advocate
    assert ctx.role is Role.advocate
    assert not ctx.has_permission("delete", "opportunities")


@pytest.mark.asyncio
async def test_refresh_is_idempotent() -> None:
    store = FakeStore()
    ctx = SessionContext(store)
    await ctx.sign_in(Identity(id="adv"))

    first = await ctx.refresh()
    first_tenant = ctx.get_current_tenant()
    second = await ctx.refresh()

    assert first == second
    assert ctx.get_current_tenant() == first_tenant == ACME
    assert await ctx.get_current_role() is Role.advocate
    assert await ctx.get_current_role() is Role.advocate


@pytest.mark.asyncio
async def test_stale_sign_in_is_discarded_after_principal_swap() -> None:
    store = GatedStore(blocked="rep")
    ctx = SessionContext(store)

    slow = asyncio.create_task(ctx.sign_in(Identity(id="rep")))
    await store.entered.wait()
    assert ctx.get_current_principal().loading is True

    await ctx.sign_in(Identity(id="adv"))
    store.release.set()
    await slow

    principal = ctx.get_current_principal().principal
    assert principal is not None and principal.id == "adv"
    assert ctx.role is Role.advocate


@pytest.mark.asyncio
async def test_stale_sign_in_is_discarded_after_sign_out() -> None:
    store = GatedStore(blocked="root")
    ctx = SessionContext(store)

    slow = asyncio.create_task(ctx.sign_in(Identity(id="root")))
    await store.entered.wait()
    ctx.sign_out()
    store.release.set()
    await slow

    assert ctx.state is SessionState.anonymous
    assert ctx.has_permission("read", "anything") is False


@pytest.mark.asyncio
async def test_stale_role_refetch_is_discarded() -> None:
    store = GatedStore(blocked="")
    ctx = SessionContext(store)
    await ctx.sign_in(Identity(id="rep"))

    store.blocked = "rep"
    pending = asyncio.create_task(ctx.get_current_role())
    await store.entered.wait()
    await ctx.sign_in(Identity(id="adv"))
    store.release.set()

    assert await pending is None
    assert ctx.role is Role.advocate


@pytest.mark.asyncio
async def test_role_refetch_follows_company_move() -> None:
    store = FakeStore()
    ctx = SessionContext(store)
    await ctx.sign_in(Identity(id="rep"))

    store.users["rep"] = UserRecord(id="rep", role="advocate", company_id=GLOBEX.id)
    assert await ctx.get_current_role() is Role.advocate

    principal = ctx.get_current_principal().principal
    assert principal is not None and principal.tenant_id == GLOBEX.id
    assert ctx.get_current_tenant() == GLOBEX


@pytest.mark.asyncio
async def test_role_refetch_does_not_undo_concurrent_refresh() -> None:
    store = GatedStore(blocked="")
    ctx = SessionContext(store)
    await ctx.sign_in(Identity(id="rep"))
    store.users["rep"] = UserRecord(id="rep", role="advocate", company_id=GLOBEX.id)

    store.blocked = "rep"
    pending = asyncio.create_task(ctx.get_current_role())
    await store.entered.wait()
    # Only the first lookup blocks; the refresh runs to completion meanwhile.
    store.blocked = ""
    await ctx.refresh()
    store.release.set()

    assert await pending is Role.advocate
    principal = ctx.get_current_principal().principal
    assert principal is not None
    assert principal.role is Role.advocate
    assert principal.tenant_id == GLOBEX.id
    assert ctx.get_current_tenant() == GLOBEX


@pytest.mark.asyncio
async def test_resolve_with_provider() -> None:
    ctx = SessionContext(FakeStore())
    snap = await ctx.resolve(StaticProvider(Identity(id="root")))
    assert snap.loading is False
    assert snap.principal is not None and snap.principal.is_admin


@pytest.mark.asyncio
async def test_resolve_without_identity_is_anonymous() -> None:
    ctx = SessionContext(FakeStore())
    snap = await ctx.resolve(StaticProvider(None))
    assert ctx.state is SessionState.anonymous
    assert snap.principal is None and snap.loading is False


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [RuntimeError("provider down"), IdentityExpired("expired")])
async def test_resolve_failure_is_anonymous(error: Exception) -> None:
    ctx = SessionContext(FakeStore())
    await ctx.sign_in(Identity(id="rep"))

    snap = await ctx.resolve(StaticProvider(error=error))
    assert ctx.state is SessionState.anonymous
    assert snap.principal is None and snap.loading is False
    assert ctx.role is None


@pytest.mark.asyncio
async def test_expire_drops_session() -> None:
    ctx = SessionContext(FakeStore())
    await ctx.sign_in(Identity(id="rep"))
    ctx.expire()
    assert ctx.state is SessionState.anonymous
    await ctx.sign_in(Identity(id="rep"))
    assert ctx.state is SessionState.authenticated


@pytest.mark.asyncio
async def test_admin_can_switch_tenant_until_refresh() -> None:
    ctx = SessionContext(FakeStore())
    await ctx.sign_in(Identity(id="root"))

    assert await ctx.switch_tenant(GLOBEX.id) == GLOBEX
    assert ctx.get_current_tenant() == GLOBEX
    principal = ctx.get_current_principal().principal
    assert principal is not None and principal.tenant_id == ACME.id

    await ctx.refresh()
    assert ctx.get_current_tenant() == ACME


@pytest.mark.asyncio
async def test_switch_tenant_rules() -> None:
    ctx = SessionContext(FakeStore())
    with pytest.raises(TenantSwitchDenied):
        await ctx.switch_tenant(GLOBEX.id)

    await ctx.sign_in(Identity(id="rep"))
    with pytest.raises(TenantSwitchDenied):
        await ctx.switch_tenant(GLOBEX.id)
    assert ctx.get_current_tenant() == ACME

    await ctx.sign_in(Identity(id="root"))
    with pytest.raises(TenantNotFound):
        await ctx.switch_tenant("t-missing")


# --- Module Notes -----------------------------------------------------------
# The gated store makes "completes after the swap" deterministic without sleeps.
