"""
API key loading and validation

Reads the Alpha Vantage API key from a key file (or the environment), validates
its format and keeps it out of logs and error messages.
"""

import os
from pathlib import Path
from typing import List, Optional, Union

from .logger import get_logger

logger = get_logger(__name__, utility="credentials")

API_KEY_ENV_VAR = "ALPHAVANTAGE_API_KEY"


class CredentialValidationError(Exception):
    """
    Raised when a credential cannot be loaded or has the wrong format.
    Never exposes sensitive credential data in error messages.
    """

    def __init__(self, message: str, credential_type: str = "credential"):
        self.message = message
        self.credential_type = credential_type
        super().__init__(message)

        logger.warning(f"Credential validation failed for {credential_type}: {message}")


class APIKeyValidator:
    """Validator for Alpha Vantage API keys (16 alphanumeric characters)"""

    KEY_LENGTH = 16

    def __init__(self, provider_name: str = "alpha_vantage"):
        self.provider_name = provider_name

    @property
    def credential_type(self) -> str:
        return f"api_key_{self.provider_name}"

    def validate(self, credential: str) -> bool:
        return not self.get_validation_errors(credential)

    def get_validation_errors(self, credential: str) -> List[str]:
        """Get validation error messages without exposing credential data"""
        errors = []

        if not isinstance(credential, str):
            errors.append("Credential must be a string")
            return errors

        if len(credential) != self.KEY_LENGTH:
            errors.append(f"Credential must be exactly {self.KEY_LENGTH} characters long")

        if not credential.isalnum():
            errors.append("Credential contains invalid characters")

        return errors


def mask_credential(credential: str) -> str:
    """
    Mask a credential for safe display/logging

    Args:
        credential: The credential to mask

    Returns:
        Masked representation
    """
    if not credential:
        return ""

    length = len(credential)
    if length <= 8:
        return "*" * length
    else:
        return f"{credential[:4]}{'*' * (length - 8)}{credential[-4:]}"


def load_api_key(path: Optional[Union[str, Path]] = None, provider: str = "alpha_vantage") -> str:
    """
    Load and validate the API key.

    The key file takes precedence; when no path is given the key is read from
    the ``ALPHAVANTAGE_API_KEY`` environment variable.

    Raises:
        CredentialValidationError: if the key is missing or malformed
    """
    validator = APIKeyValidator(provider)

    if path is not None:
        try:
            api_key = Path(path).read_text(encoding="utf-8").strip()
        except OSError:
            raise CredentialValidationError(
                "Error reading the API key file. Is it missing?", validator.credential_type
            )
    else:
        api_key = os.getenv(API_KEY_ENV_VAR, "").strip()
        if not api_key:
            raise CredentialValidationError(
                f"{API_KEY_ENV_VAR} is not set", validator.credential_type
            )

    errors = validator.get_validation_errors(api_key)
    if errors:
        raise CredentialValidationError(
            "The API key does not have the proper format: " + "; ".join(errors),
            validator.credential_type,
        )

    logger.info(f"Loaded {validator.credential_type} ({mask_credential(api_key)})")
    return api_key
