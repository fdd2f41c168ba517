"""
Exception Handlers globais para o FastAPI.

Centraliza o tratamento de todas as exceções PawmiError e erros genéricos,
garantindo respostas JSON padronizadas e evitando vazamento de stack traces.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from pawmi.config.exceptions import PawmiError

logger = logging.getLogger("pawmi.server")

_DETAIL_ATTRS = ("field", "resource", "identifier", "hostname")


def error_payload(exc: PawmiError) -> dict:
    """Corpo padrão {success, error: {code, message, details}}."""
    details = {}
    for attr in _DETAIL_ATTRS:
        if getattr(exc, attr, None) is not None:
            details[attr] = getattr(exc, attr)

    return {
        "success": False,
        "error": {
            "code": exc.code,
            "message": exc.message,
            "details": details if details else None,
        },
    }


def error_response(exc: PawmiError) -> JSONResponse:
    return JSONResponse(
        status_code=getattr(exc, "status_code", 500), content=error_payload(exc)
    )


async def pawmi_exception_handler(request: Request, exc: PawmiError) -> JSONResponse:
    """
    Handler global para todas as exceções PawmiError e subclasses.

    Args:
        request: Request FastAPI
        exc: Exceção PawmiError (ou subclasse)

    Returns:
        JSONResponse com status_code apropriado
    """
    status_code = getattr(exc, "status_code", 500)

    if status_code >= 500:
        logger.error(f"[{exc.code}] {exc.message} - Path: {request.url.path}")
    else:
        logger.warning(f"[{exc.code}] {exc.message} - Path: {request.url.path}")

    return error_response(exc)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler de fallback para exceções não tratadas.

    Retorna uma resposta genérica sem vazar detalhes internos.
    """
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Erro interno do servidor. Tente novamente.",
                "details": None,
            },
        },
    )
