from .identity import TokenVerifier, build_token_verifier
from .tenant_store import TenantStore, build_tenant_store

__all__ = ["TenantStore", "TokenVerifier", "build_tenant_store", "build_token_verifier"]
