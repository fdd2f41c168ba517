import pytest

from pawmi.config.exceptions import (
    AccountRequiredError,
    ConfigurationError,
    DatabaseError,
    DomainLookupError,
    IdentityVerificationError,
    InvalidApiKeyError,
    NotFoundError,
    PawmiError,
    ValidationError,
)

pytestmark = pytest.mark.unit


def test_pawmi_error_defaults():
    exc = PawmiError("oops")
    assert exc.message == "oops"
    assert exc.code == "PAWMI_ERROR"
    assert exc.status_code == 500


@pytest.mark.parametrize(
    "exc,code,status",
    [
        (ConfigurationError("bad config"), "CONFIG_ERROR", 500),
        (DatabaseError("db down"), "DB_ERROR", 503),
        (IdentityVerificationError("expired_signature"), "INVALID_TOKEN", 401),
        (InvalidApiKeyError(), "INVALID_API_KEY", 401),
        (AccountRequiredError(), "ACCOUNT_REQUIRED", 401),
        (ValidationError("bad", field="status"), "VALIDATION_ERROR", 400),
        (NotFoundError("Domínio", "d-1"), "NOT_FOUND", 404),
    ],
)
def test_error_codes_and_status(exc, code, status):
    assert isinstance(exc, PawmiError)
    assert exc.code == code
    assert exc.status_code == status


def test_domain_lookup_error_is_a_database_error():
    exc = DomainLookupError("portal.acme.com", "timeout")
    assert isinstance(exc, DatabaseError)
    assert exc.code == "DOMAIN_LOOKUP_ERROR"
    assert exc.status_code == 503
    assert exc.hostname == "portal.acme.com"
    assert "timeout" in str(exc)


def test_not_found_message_with_and_without_identifier():
    assert NotFoundError("Domínio").message == "Domínio não encontrado"
    assert NotFoundError("Domínio", "d-1").message == "Domínio 'd-1' não encontrado"


def test_identity_error_keeps_reason():
    exc = IdentityVerificationError("invalid_audience")
    assert exc.reason == "invalid_audience"
    assert "invalid_audience" in exc.message
