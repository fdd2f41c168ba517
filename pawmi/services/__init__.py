from .api_keys import ApiKeyAuthenticator
from .domain_cache import DomainCache
from .domains import CustomDomainService
from .origin_authorizer import CustomDomainAuthorizer, LookupResult, OriginGate
from .origin_policy import StaticOriginPolicy
from .tenant_resolver import TenantResolver

__all__ = [
    "ApiKeyAuthenticator",
    "CustomDomainAuthorizer",
    "CustomDomainService",
    "DomainCache",
    "LookupResult",
    "OriginGate",
    "StaticOriginPolicy",
    "TenantResolver",
]
