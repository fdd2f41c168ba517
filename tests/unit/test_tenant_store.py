from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from pawmi.config.exceptions import DatabaseError, DomainLookupError
from pawmi.domain.sqlmodels import Account, AccountMember, ApiKey, CustomDomain
from pawmi.infrastructure import tenant_store
from pawmi.infrastructure.tenant_store import TenantStore
from pawmi.services.api_keys import generate_api_key

pytestmark = pytest.mark.unit


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def _session():
        async with maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    yield _session
    await engine.dispose()


async def _seed(session_factory, *rows):
    async with session_factory() as session:
        for row in rows:
            session.add(row)
            # accounts antes das FKs
            await session.flush()


@pytest.mark.asyncio
async def test_find_active_custom_domain(session_factory):
    acct = Account(id="acct_1", name="Acme Grooming")
    await _seed(
        session_factory,
        acct,
        CustomDomain(account_id="acct_1", domain="portal.acme.com", slug="acme", status="active"),
        CustomDomain(account_id="acct_1", domain="old.acme.com", slug="acme", status="disabled"),
    )
    store = TenantStore(session_factory)

    found = await store.find_active_custom_domain("portal.acme.com")
    assert found is not None and found.account_id == "acct_1"
    assert (await store.find_active_custom_domain("PORTAL.ACME.COM")) is not None
    assert await store.find_active_custom_domain("old.acme.com") is None
    assert await store.find_active_custom_domain("evil.com") is None


@pytest.mark.asyncio
async def test_first_accepted_membership_orders_by_created_at(session_factory):
    now = datetime.now(timezone.utc)
    await _seed(
        session_factory,
        Account(id="acct_old", name="Old"),
        Account(id="acct_new", name="New"),
        Account(id="acct_pending", name="Pending"),
        AccountMember(
            account_id="acct_new", user_id="u1", status="accepted", created_at=now
        ),
        AccountMember(
            account_id="acct_pending",
            user_id="u1",
            status="pending",
            created_at=now - timedelta(days=60),
        ),
        AccountMember(
            account_id="acct_old",
            user_id="u1",
            status="accepted",
            created_at=now - timedelta(days=30),
        ),
    )
    store = TenantStore(session_factory)

    member = await store.first_accepted_membership("u1")

    assert member.account_id == "acct_old"
    assert await store.first_accepted_membership("u2") is None


@pytest.mark.asyncio
async def test_api_key_lookup_and_touch(session_factory):
    raw, prefix, key_hash = generate_api_key()
    await _seed(
        session_factory,
        Account(id="acct_1", name="Acme"),
        ApiKey(id="k1", account_id="acct_1", name="zapier", key_prefix=prefix, key_hash=key_hash),
        ApiKey(
            id="k2",
            account_id="acct_1",
            name="old",
            key_prefix=prefix,
            key_hash="0" * 64,
            status="revoked",
        ),
    )
    store = TenantStore(session_factory)

    key = await store.find_active_api_key(prefix, key_hash)
    assert key.id == "k1"
    assert key.last_used_at is None
    assert await store.find_active_api_key(prefix, "0" * 64) is None

    await store.touch_api_key("k1")
    touched = await store.find_active_api_key(prefix, key_hash)
    assert touched.last_used_at is not None


@pytest.mark.asyncio
async def test_update_custom_domain_status_sets_verified_at_once(session_factory):
    await _seed(
        session_factory,
        Account(id="acct_1", name="Acme"),
        CustomDomain(id="d1", account_id="acct_1", domain="portal.acme.com", slug="acme"),
    )
    store = TenantStore(session_factory)

    active = await store.update_custom_domain_status("d1", "active")
    assert active.status == "active"
    verified_at = active.verified_at
    assert verified_at is not None

    disabled = await store.update_custom_domain_status("d1", "disabled")
    assert disabled.status == "disabled"
    assert disabled.verified_at.replace(tzinfo=None) == verified_at.replace(tzinfo=None)
    assert await store.update_custom_domain_status("missing", "active") is None


@pytest.mark.asyncio
async def test_sqlalchemy_errors_become_database_error():
    from sqlalchemy.exc import OperationalError

    @asynccontextmanager
    async def _broken_session():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        yield  # pragma: no cover

    store = TenantStore(_broken_session)

    with pytest.raises(DomainLookupError) as exc_info:
        await store.find_active_custom_domain("portal.acme.com")
    assert exc_info.value.hostname == "portal.acme.com"
    with pytest.raises(DatabaseError):
        await store.first_accepted_membership("u1")


def test_build_tenant_store_requires_database_url(monkeypatch):
    monkeypatch.setattr(tenant_store.settings.database, "url", None)
    assert tenant_store.build_tenant_store() is None

    monkeypatch.setattr(tenant_store.settings.database, "url", "sqlite+aiosqlite:///:memory:")
    assert isinstance(tenant_store.build_tenant_store(), TenantStore)
