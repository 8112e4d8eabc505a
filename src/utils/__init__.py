# Shared utilities for the collector

from .core.logger import get_logger, shutdown_logging
from .core.credentials import CredentialValidationError, load_api_key, mask_credential
