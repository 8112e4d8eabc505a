import pytest

from src.utils.core.credentials import (
    API_KEY_ENV_VAR,
    APIKeyValidator,
    CredentialValidationError,
    load_api_key,
    mask_credential,
)

VALID_KEY = "ABCDEFGH12345678"


@pytest.mark.unit
def test_load_api_key_from_file_strips_whitespace(tmp_path):
    path = tmp_path / "apikey.txt"
    path.write_text(f"{VALID_KEY}\n")

    assert load_api_key(path) == VALID_KEY


@pytest.mark.unit
def test_missing_key_file_raises(tmp_path):
    with pytest.raises(CredentialValidationError):
        load_api_key(tmp_path / "apikey.txt")


@pytest.mark.unit
@pytest.mark.parametrize("key", ["SHORT", VALID_KEY + "X", "ABCDEFGH1234567!"])
def test_malformed_key_raises_without_echoing_it(tmp_path, key):
    path = tmp_path / "apikey.txt"
    path.write_text(key)

    with pytest.raises(CredentialValidationError) as exc:
        load_api_key(path)

    if key in str(exc.value):
        raise AssertionError("Credential leaked into the error message")
    assert exc.value.credential_type == "api_key_alpha_vantage"


@pytest.mark.unit
def test_key_from_environment(monkeypatch):
    monkeypatch.setenv(API_KEY_ENV_VAR, VALID_KEY)

    assert load_api_key() == VALID_KEY


@pytest.mark.unit
def test_unset_environment_raises(monkeypatch):
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)

    with pytest.raises(CredentialValidationError):
        load_api_key()


@pytest.mark.unit
def test_validator_errors():
    validator = APIKeyValidator()

    assert validator.validate(VALID_KEY)
    assert validator.get_validation_errors(12345) == ["Credential must be a string"]
    assert len(validator.get_validation_errors("bad key!")) == 2


@pytest.mark.unit
@pytest.mark.parametrize(
    "credential, masked",
    [("", ""), ("abc", "***"), (VALID_KEY, "ABCD********5678")],
)
def test_mask_credential(credential, masked):
    assert mask_credential(credential) == masked
