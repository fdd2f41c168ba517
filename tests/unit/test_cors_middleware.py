import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pawmi.server.cors import OriginGateCORSMiddleware
from pawmi.services.domain_cache import DomainCache
from pawmi.services.origin_authorizer import CustomDomainAuthorizer, OriginGate
from pawmi.services.origin_policy import StaticOriginPolicy

pytestmark = pytest.mark.unit


def _client(allowed_origins: str, store=None) -> TestClient:
    app = FastAPI()

    @app.get("/api/v1/ping")
    async def ping():
        return {"pong": True}

    authorizer = CustomDomainAuthorizer(store, DomainCache(ttl_seconds=300))
    gate = OriginGate(StaticOriginPolicy.from_setting(allowed_origins), authorizer)
    app.add_middleware(OriginGateCORSMiddleware, gate=gate, max_age=600)
    return TestClient(app)


def _preflight(client: TestClient, origin: str, headers: str = "authorization,x-api-key"):
    return client.options(
        "/api/v1/ping",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": headers,
        },
    )


def test_allowed_origin_gets_explicit_cors_headers():
    client = _client("https://app.example.com")

    response = client.get("/api/v1/ping", headers={"Origin": "https://app.example.com"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://app.example.com"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert "origin" in response.headers["vary"].lower()


def test_allowed_preflight_declares_methods_and_headers():
    client = _client("*.example.com")

    response = _preflight(client, "https://tenant1.example.com")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://tenant1.example.com"
    methods = response.headers["access-control-allow-methods"]
    for method in ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"):
        assert method in methods
    allow_headers = response.headers["access-control-allow-headers"].lower()
    for header in ("content-type", "authorization", "x-api-key"):
        assert header in allow_headers
    assert response.headers["access-control-max-age"] == "600"


def test_disallowed_preflight_is_rejected():
    client = _client("https://app.example.com")

    response = _preflight(client, "https://evil.com")

    assert response.status_code == 400
    assert response.text == "Disallowed CORS origin"
    assert "access-control-allow-origin" not in response.headers


def test_disallowed_simple_request_gets_response_without_cors_headers():
    client = _client("https://app.example.com")

    response = client.get("/api/v1/ping", headers={"Origin": "https://evil.com"})

    assert response.status_code == 200
    assert response.json() == {"pong": True}
    assert "access-control-allow-origin" not in response.headers


def test_request_without_origin_passes_untouched():
    client = _client("")

    response = client.get("/api/v1/ping")

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_empty_origin_header_passes_untouched():
    client = _client("https://app.example.com")

    response = client.get("/api/v1/ping", headers={"Origin": ""})

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_active_custom_domain_is_allowed(store_factory):
    store = store_factory(domains={"portal.acme.com": "active"})
    client = _client("https://app.example.com", store=store)

    first = client.get("/api/v1/ping", headers={"Origin": "https://portal.acme.com"})
    second = _preflight(client, "https://portal.acme.com")

    assert first.headers["access-control-allow-origin"] == "https://portal.acme.com"
    assert second.status_code == 200
    assert store.domain_calls == ["portal.acme.com"]


def test_custom_domain_lookup_failure_denies(store_factory):
    store = store_factory(domains={"portal.acme.com": "active"})
    store.domain_error = RuntimeError("db unreachable")
    client = _client("https://app.example.com", store=store)

    response = _preflight(client, "https://portal.acme.com")

    assert response.status_code == 400


def test_decision_does_not_leak_between_requests():
    client = _client("https://app.example.com")

    allowed = client.get("/api/v1/ping", headers={"Origin": "https://app.example.com"})
    denied = client.get("/api/v1/ping", headers={"Origin": "https://evil.com"})

    assert "access-control-allow-origin" in allowed.headers
    assert "access-control-allow-origin" not in denied.headers
