import os
import sys
import time
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

# Ensure project root is in path for imports to work
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

TEST_JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"


class FakeClock:
    """Relógio manual para testar TTL sem sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTenantStore:
    """
    Store em memória com contadores de chamadas.

    domains: {hostname: status}
    memberships: lista de SimpleNamespace(account_id, user_id, status, created_at)
    api_keys: {(prefix, hash): SimpleNamespace(id, account_id, status)}
    """

    def __init__(self, domains=None, memberships=None, api_keys=None):
        self.domains = dict(domains or {})
        self.memberships = list(memberships or [])
        self.api_keys = dict(api_keys or {})
        self.domain_calls: list[str] = []
        self.membership_calls: list[str] = []
        self.api_key_calls: list[tuple[str, str]] = []
        self.touched: list[str] = []
        self.domain_error: Exception | None = None
        self.membership_error: Exception | None = None
        self.api_key_error: Exception | None = None
        self.domain_delay: float = 0.0

    async def find_active_custom_domain(self, hostname):
        self.domain_calls.append(hostname)
        if self.domain_delay:
            import asyncio

            await asyncio.sleep(self.domain_delay)
        if self.domain_error is not None:
            raise self.domain_error
        if self.domains.get(hostname) == "active":
            return SimpleNamespace(domain=hostname, status="active")
        return None

    async def first_accepted_membership(self, user_id):
        self.membership_calls.append(user_id)
        if self.membership_error is not None:
            raise self.membership_error
        accepted = [
            m for m in self.memberships if m.user_id == user_id and m.status == "accepted"
        ]
        accepted.sort(key=lambda m: m.created_at)
        return accepted[0] if accepted else None

    async def find_active_api_key(self, key_prefix, key_hash):
        self.api_key_calls.append((key_prefix, key_hash))
        if self.api_key_error is not None:
            raise self.api_key_error
        key = self.api_keys.get((key_prefix, key_hash))
        if key is None or key.status != "active":
            return None
        return key

    async def touch_api_key(self, key_id):
        self.touched.append(key_id)

    async def update_custom_domain_status(self, domain_id, status):
        for hostname, _ in list(self.domains.items()):
            if hostname == domain_id:
                self.domains[hostname] = status
                return SimpleNamespace(id=domain_id, domain=hostname, status=status)
        return None


def membership(account_id: str, user_id: str, days_ago: int, status: str = "accepted"):
    created_at = datetime.now(timezone.utc) - timedelta(days=days_ago)
    return SimpleNamespace(
        account_id=account_id, user_id=user_id, status=status, created_at=created_at
    )


def make_token(sub: str = "user-1", secret: str = TEST_JWT_SECRET, **overrides) -> str:
    now = int(time.time())
    payload = {
        "sub": sub,
        "aud": "authenticated",
        "iat": now,
        "exp": now + 3600,
    }
    payload.update(overrides)
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_store():
    return FakeTenantStore()


@pytest.fixture
def store_factory():
    return FakeTenantStore


@pytest.fixture
def membership_factory():
    return membership


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def jwt_secret():
    return TEST_JWT_SECRET
