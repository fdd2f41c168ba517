from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request

from pawmi.server.dependencies import get_current_account, require_account

router = APIRouter()


@router.get("/health")
async def health():
    return {"ok": True}


@router.get("/session/account")
async def session_account(
    request: Request,
    account_id: Annotated[Optional[str], Depends(get_current_account)],
):
    """Tenant resolvido para esta requisição (não exige tenant)."""
    source = getattr(request.state, "account_source", None) if account_id else None
    return {"accountId": account_id, "source": source}


@router.get("/session/bootstrap")
async def session_bootstrap(
    request: Request,
    account_id: Annotated[str, Depends(require_account)],
):
    """Ponto de entrada do painel: exige tenant (401 ACCOUNT_REQUIRED sem ele)."""
    return {
        "accountId": account_id,
        "source": getattr(request.state, "account_source", None),
    }
