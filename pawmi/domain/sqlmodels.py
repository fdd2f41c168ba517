"""
Modelos SQLModel das tabelas multi-tenant lidas pelo gate.

Cada modelo serve simultaneamente como:
- Tabela do banco de dados (ORM)
- Schema Pydantic para validação e serialização (API)

Os demais domínios (clientes, pets, serviços, agendamentos, branding)
pertencem a superfícies CRUD que não passam pelo gate.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from sqlmodel import Field, SQLModel

MemberRole = Literal["owner", "admin", "member"]
MembershipStatus = Literal["pending", "accepted", "revoked"]
DomainStatus = Literal["pending", "active", "error", "disabled"]
ApiKeyStatus = Literal["active", "revoked"]

DOMAIN_STATUSES: tuple[str, ...] = ("pending", "active", "error", "disabled")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# Core Multi-Tenant Models
# ============================================================


class Account(SQLModel, table=True):
    """Tenant: organização isolada dentro do SaaS."""

    __tablename__ = "accounts"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    name: str = Field(max_length=255)
    slug: Optional[str] = Field(default=None, unique=True, max_length=255)
    plan: str = Field(default="standard", max_length=64)
    created_at: datetime = Field(default_factory=_utcnow)


class AccountMember(SQLModel, table=True):
    """Vínculo usuário ↔ conta, com papel e status de aceite."""

    __tablename__ = "account_members"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    account_id: str = Field(foreign_key="accounts.id", index=True, max_length=36)
    user_id: str = Field(index=True, max_length=36)
    role: str = Field(default="member", max_length=20)
    status: str = Field(default="accepted", max_length=20, index=True)
    created_at: datetime = Field(default_factory=_utcnow)


class CustomDomain(SQLModel, table=True):
    """
    Hostname registrado por um tenant para o portal com a sua marca.

    status:
        - 'pending'  → aguardando verificação DNS
        - 'active'   → verificado; liberado no CORS
        - 'error'    → verificação falhou
        - 'disabled' → desligado pelo tenant ou pela plataforma
    """

    __tablename__ = "custom_domains"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    account_id: str = Field(foreign_key="accounts.id", index=True, max_length=36)
    # Sempre minúsculo (constraint no Postgres)
    domain: str = Field(unique=True, index=True, max_length=255)
    slug: str = Field(max_length=255)
    status: str = Field(default="pending", max_length=20, index=True)
    verified_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ApiKey(SQLModel, table=True):
    """Chave de integração autenticando uma conta sem sessão de usuário."""

    __tablename__ = "api_keys"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    account_id: str = Field(foreign_key="accounts.id", index=True, max_length=36)
    name: str = Field(max_length=255)
    key_prefix: str = Field(index=True, max_length=32)
    key_hash: str = Field(max_length=64)
    status: str = Field(default="active", max_length=20)
    created_by: Optional[str] = Field(default=None, max_length=36)
    created_at: datetime = Field(default_factory=_utcnow)
    last_used_at: Optional[datetime] = Field(default=None)
