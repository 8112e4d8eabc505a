# Core utilities package
# Contains foundational infrastructure utilities for the application

__all__ = [
    "get_logger",
    "shutdown_logging",
    "CredentialValidationError",
    "load_api_key",
    "mask_credential",
]

from .logger import get_logger, shutdown_logging
from .credentials import CredentialValidationError, load_api_key, mask_credential
