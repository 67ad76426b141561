"""Firebase Token Generator - OAuth 2.0 access tokens from service accounts.

This package provides:
- Loading and validating service account key files
- Issuing access tokens through the JWT-bearer grant
- Postman and cURL header formats plus a persisted token snapshot
"""

from firebase_token.config import AppConfig, load_config
from firebase_token.credentials import (
    REQUIRED_FIELDS,
    ServiceAccountCredential,
    is_valid_service_account,
    load_service_account,
    missing_fields,
)
from firebase_token.exceptions import (
    ConfigError,
    CredentialReadError,
    IncompleteCredentialError,
    PersistenceError,
    TokenGeneratorError,
    TokenIssuanceError,
)
from firebase_token.issuer import IssuerConfig, TokenIssuer, issue_token
from firebase_token.storage import build_snapshot, load_snapshot, save_snapshot
from firebase_token.token import (
    TokenRecord,
    is_token_valid,
    normalize_token_response,
    remaining_seconds,
    to_curl_header_args,
    to_postman_headers,
)

__version__ = "1.0.0"
__all__ = [
    "AppConfig",
    "load_config",
    "REQUIRED_FIELDS",
    "ServiceAccountCredential",
    "is_valid_service_account",
    "load_service_account",
    "missing_fields",
    "IssuerConfig",
    "TokenIssuer",
    "issue_token",
    "TokenRecord",
    "is_token_valid",
    "normalize_token_response",
    "remaining_seconds",
    "to_curl_header_args",
    "to_postman_headers",
    "build_snapshot",
    "load_snapshot",
    "save_snapshot",
    # Exceptions
    "TokenGeneratorError",
    "ConfigError",
    "CredentialReadError",
    "IncompleteCredentialError",
    "TokenIssuanceError",
    "PersistenceError",
]
