"""Firebase token generator exceptions."""

from __future__ import annotations


class TokenGeneratorError(Exception):
    """Base exception for all token generator errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(TokenGeneratorError):
    """Raised when the configuration file cannot be loaded."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class CredentialReadError(TokenGeneratorError):
    """Raised when a service account file is missing or unparsable."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class IncompleteCredentialError(TokenGeneratorError):
    """Raised when a service account record lacks required fields."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message, details={"missing": missing or []})
        self.missing = missing or []


class TokenIssuanceError(TokenGeneratorError):
    """Raised when an access token could not be obtained."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class PersistenceError(TokenGeneratorError):
    """Raised when the token file cannot be written or read."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path
