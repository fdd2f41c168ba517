from __future__ import annotations

from typing import Optional


def extract_bearer_token(auth_header: Optional[str]) -> str | None:
    """Token do header "Authorization: Bearer <token>" (esquema case-insensitive)."""
    if not auth_header or not auth_header.lower().startswith("bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def header_value(scope: dict, name: bytes) -> str | None:
    """Primeiro valor de um header no scope ASGI (nome em minúsculas)."""
    for key, value in scope.get("headers", []):
        if key == name:
            return value.decode("latin-1")
    return None
