"""
Constantes centralizadas da API.
Magic numbers e strings do gate de tenant/origem ficam aqui.
"""


class ApiRoutes:
    """Rotas da API REST."""

    PREFIX = "/api/v1"
    HEALTH = "/api/v1/health"
    SESSION_ACCOUNT = "/api/v1/session/account"
    SESSION_BOOTSTRAP = "/api/v1/session/bootstrap"


class HttpHeaders:
    """Headers HTTP usados pelo gate."""

    AUTHORIZATION = "authorization"
    ORIGIN = "origin"
    SERVER_TIMING = "Server-Timing"
    RESPONSE_TIME = "X-Response-Time"


class CorsPolicy:
    """Política CORS declarada para todas as rotas."""

    ALLOW_ALL = "*"
    WILDCARD_PREFIX = "*."
    ALLOW_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
    ALLOW_HEADERS = ("Content-Type", "Authorization", "x-api-key")
    ALLOW_CREDENTIALS = True


class AccountSource:
    """Quem vinculou o accountId à requisição."""

    API_KEY = "api_key"
    BEARER = "bearer"


class ApiKeyFormat:
    """Formato das API keys emitidas para integrações."""

    PREFIX = "pk_"
    PREFIX_LENGTH = 12  # caracteres guardados em api_keys.key_prefix
    RANDOM_BYTES = 24


class PerformanceConfig:
    """Configurações de performance."""

    GZIP_MIN_SIZE = 1000  # Tamanho mínimo para compressão (bytes)
    GZIP_COMPRESSION_LEVEL = 1
    JWT_CACHE_TTL = 60.0  # segundos
    JWT_CACHE_MAX_SIZE = 1000
