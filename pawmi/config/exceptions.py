"""
Exceções customizadas da API Pawmi.
Hierarquia de exceções para tratamento de erros consistente.

Cada exceção define:
- message: Mensagem legível para o usuário
- code: Código de erro para programático (ex: "VALIDATION_ERROR")
- status_code: Código HTTP padrão para a exceção

O gate de tenant/origem nunca deixa estas exceções escaparem: elas são
levantadas pelos colaboradores (banco, provedor de identidade) e convertidas
no valor seguro (negar origem / nenhum tenant) na borda do gate.
"""


class PawmiError(Exception):
    """Exceção base da API. Todas as exceções customizadas herdam desta."""

    status_code: int = 500  # Default para erros internos

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or "PAWMI_ERROR"
        super().__init__(self.message)


class ConfigurationError(PawmiError):
    """Erro de configuração (variável ausente, formato inválido, etc.)."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR")


class DatabaseError(PawmiError):
    """Erro de banco de dados (conexão, query, etc.)."""

    status_code = 503  # Service Unavailable

    def __init__(self, message: str):
        super().__init__(message, "DB_ERROR")


class DomainLookupError(DatabaseError):
    """Falha ao consultar a tabela de domínios customizados."""

    def __init__(self, hostname: str, reason: str):
        super().__init__(f"Consulta de domínio falhou para {hostname}: {reason}")
        self.code = "DOMAIN_LOOKUP_ERROR"
        self.hostname = hostname
        self.reason = reason


class IdentityVerificationError(PawmiError):
    """Token bearer inválido, expirado ou sem usuário."""

    status_code = 401

    def __init__(self, reason: str):
        super().__init__(f"Token inválido: {reason}", "INVALID_TOKEN")
        self.reason = reason


class InvalidApiKeyError(PawmiError):
    """API key apresentada não existe ou foi revogada."""

    status_code = 401

    def __init__(self, message: str = "API key inválida"):
        super().__init__(message, "INVALID_API_KEY")


class AccountRequiredError(PawmiError):
    """Rota exige um tenant e nenhum foi resolvido para a requisição."""

    status_code = 401

    def __init__(self, message: str = "Conta não identificada"):
        super().__init__(message, "ACCOUNT_REQUIRED")


class ValidationError(PawmiError):
    """Erro de validação de input (parâmetros inválidos ou faltantes)."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class NotFoundError(PawmiError):
    """Recurso não encontrado."""

    status_code = 404

    def __init__(self, resource: str, identifier: str = None):
        message = f"{resource} não encontrado"
        if identifier:
            message = f"{resource} '{identifier}' não encontrado"
        super().__init__(message, "NOT_FOUND")
        self.resource = resource
        self.identifier = identifier
