"""Service account credential loading and validation."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from firebase_token.exceptions import CredentialReadError, IncompleteCredentialError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "type",
    "project_id",
    "private_key_id",
    "private_key",
    "client_email",
    "client_id",
    "auth_uri",
    "token_uri",
)

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


def missing_fields(data: Mapping[str, Any] | None) -> list[str]:
    """Return the required field names absent from a service account record."""
    if data is None:
        return list(REQUIRED_FIELDS)
    return [name for name in REQUIRED_FIELDS if name not in data]


def is_valid_service_account(data: Mapping[str, Any] | None) -> bool:
    """Check that all eight required fields are present.

    Never raises; callers decide whether a False result is fatal.
    """
    return not missing_fields(data)


@dataclass
class ServiceAccountCredential:
    """A service account key as downloaded from the Google Cloud console.

    Fields are optional so that an incomplete file can still be loaded and
    reported on; use ``is_valid`` or ``require_complete`` before issuing.
    """

    type: str | None = None
    project_id: str | None = None
    private_key_id: str | None = None
    private_key: str | None = None  # PEM-encoded signing key
    client_email: str | None = None  # JWT issuer identity
    client_id: str | None = None
    auth_uri: str | None = None
    token_uri: str | None = None

    # Keys outside the required set (cert URLs, universe_domain, ...)
    extra: dict[str, Any] = field(default_factory=dict)

    # Required keys found in the source file, null-valued ones included.
    # None when built directly, in which case non-None fields count as present.
    present: frozenset[str] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServiceAccountCredential:
        """Build a credential from a parsed key file."""
        known = {name: data[name] for name in REQUIRED_FIELDS if name in data}
        extra = {k: v for k, v in data.items() if k not in REQUIRED_FIELDS}
        return cls(**known, extra=extra, present=frozenset(known))

    def _has(self, name: str) -> bool:
        if self.present is None:
            return getattr(self, name) is not None
        return name in self.present

    def to_dict(self) -> dict:
        """Convert to dictionary, excluding required fields that were absent."""
        result = {name: getattr(self, name) for name in REQUIRED_FIELDS if self._has(name)}
        result.update(self.extra)
        return result

    def missing_fields(self) -> list[str]:
        return missing_fields(self.to_dict())

    def is_valid(self) -> bool:
        return not self.missing_fields()

    def require_complete(self) -> None:
        """Raise if any required field is missing.

        Raises:
            IncompleteCredentialError: Listing the missing field names.
        """
        missing = self.missing_fields()
        if missing:
            raise IncompleteCredentialError(
                f"Service account is missing required fields: {', '.join(missing)}",
                missing=missing,
            )

    @property
    def endpoint(self) -> str:
        """Token endpoint used as the assertion audience."""
        return self.token_uri or DEFAULT_TOKEN_URI


def load_service_account(path: str | Path) -> ServiceAccountCredential:
    """Read and parse a service account file.

    Field completeness is not enforced here; see ``is_valid_service_account``.

    Args:
        path: Path to the service account JSON file.

    Returns:
        ServiceAccountCredential built from the file contents.

    Raises:
        CredentialReadError: If the file is unreadable or not a JSON object.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CredentialReadError(
            f"Service account file could not be read: {e}", path=str(path)
        ) from e

    if not isinstance(data, dict):
        raise CredentialReadError(
            "Service account file could not be read: expected a JSON object, "
            f"got {type(data).__name__}",
            path=str(path),
        )

    logger.debug("Loaded service account %s from %s", data.get("client_email"), path)
    return ServiceAccountCredential.from_dict(data)
