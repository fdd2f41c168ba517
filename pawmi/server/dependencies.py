from typing import Optional

from fastapi import Request

from pawmi.config.exceptions import AccountRequiredError
from pawmi.services.domains import CustomDomainService


async def get_domain_service(request: Request) -> CustomDomainService:
    """
    Dependency to get the CustomDomainService (invalida o cache de domínios).
    """
    return request.app.state.gate.domains


async def get_current_account(request: Request) -> Optional[str]:
    """accountId vinculado pelos middlewares, ou None."""
    return getattr(request.state, "account_id", None) or None


async def require_account(request: Request) -> str:
    """
    Exige tenant resolvido.

    Raises:
        AccountRequiredError: nenhum accountId vinculado à requisição
    """
    account_id = await get_current_account(request)
    if not account_id:
        raise AccountRequiredError()
    return account_id
