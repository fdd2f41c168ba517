"""Public config package exports."""

from .constants import AccountSource as AccountSource
from .constants import ApiKeyFormat as ApiKeyFormat
from .constants import ApiRoutes as ApiRoutes
from .constants import CorsPolicy as CorsPolicy
from .constants import HttpHeaders as HttpHeaders
from .constants import PerformanceConfig as PerformanceConfig
from .exceptions import AccountRequiredError as AccountRequiredError
from .exceptions import ConfigurationError as ConfigurationError
from .exceptions import DatabaseError as DatabaseError
from .exceptions import DomainLookupError as DomainLookupError
from .exceptions import IdentityVerificationError as IdentityVerificationError
from .exceptions import InvalidApiKeyError as InvalidApiKeyError
from .exceptions import NotFoundError as NotFoundError
from .exceptions import PawmiError as PawmiError
from .exceptions import ValidationError as ValidationError
from .logging_config import get_logger as get_logger
from .logging_config import setup_logging as setup_logging

__all__ = [
    "AccountSource",
    "ApiKeyFormat",
    "ApiRoutes",
    "CorsPolicy",
    "HttpHeaders",
    "PerformanceConfig",
    "PawmiError",
    "ConfigurationError",
    "DatabaseError",
    "DomainLookupError",
    "IdentityVerificationError",
    "InvalidApiKeyError",
    "AccountRequiredError",
    "NotFoundError",
    "ValidationError",
    "setup_logging",
    "get_logger",
]
