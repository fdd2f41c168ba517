from .sqlmodels import Account, AccountMember, ApiKey, CustomDomain

__all__ = ["Account", "AccountMember", "ApiKey", "CustomDomain"]
