import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from pawmi.config.exceptions import PawmiError
from pawmi.presentation.routes import system
from pawmi.server.dependencies import require_account
from pawmi.server.error_handlers import pawmi_exception_handler

pytestmark = pytest.mark.unit


class _StateMiddleware:
    """Simula o que ApiKeyMiddleware/TenantMiddleware deixam no scope."""

    def __init__(self, app, state=None):
        self.app = app
        self.state = state or {}

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            scope.setdefault("state", {}).update(self.state)
        await self.app(scope, receive, send)


def _client(state=None) -> TestClient:
    app = FastAPI()
    app.add_exception_handler(PawmiError, pawmi_exception_handler)
    app.include_router(system.router, prefix="/api/v1")

    @app.get("/api/v1/private")
    async def private(account_id: str = Depends(require_account)):
        return {"accountId": account_id}

    app.add_middleware(_StateMiddleware, state=state)
    return TestClient(app)


def test_health():
    response = _client().get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_session_account_without_tenant():
    response = _client().get("/api/v1/session/account")
    assert response.json() == {"accountId": None, "source": None}


def test_session_account_with_tenant():
    client = _client({"account_id": "acct_42", "account_source": "bearer"})
    response = client.get("/api/v1/session/account")
    assert response.json() == {"accountId": "acct_42", "source": "bearer"}


def test_require_account_rejects_missing_tenant():
    response = _client().get("/api/v1/private")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "ACCOUNT_REQUIRED"


def test_require_account_returns_tenant():
    client = _client({"account_id": "acct_api", "account_source": "api_key"})
    assert client.get("/api/v1/private").json() == {"accountId": "acct_api"}


def test_session_bootstrap_requires_tenant():
    response = _client().get("/api/v1/session/bootstrap")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "ACCOUNT_REQUIRED"


def test_session_bootstrap_with_tenant():
    client = _client({"account_id": "acct_42", "account_source": "api_key"})
    response = client.get("/api/v1/session/bootstrap")

    assert response.status_code == 200
    assert response.json() == {"accountId": "acct_42", "source": "api_key"}
