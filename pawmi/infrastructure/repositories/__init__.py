from .api_key_repository import ApiKeyRepository
from .custom_domain_repository import CustomDomainRepository
from .membership_repository import MembershipRepository

__all__ = ["ApiKeyRepository", "CustomDomainRepository", "MembershipRepository"]
