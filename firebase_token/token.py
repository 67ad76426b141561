"""Access token record, validity check and header formats."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Sequence

DEFAULT_TOKEN_TYPE = "Bearer"
DEFAULT_LIFETIME_SECONDS = 3600
CONTENT_TYPE = "application/json"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class TokenRecord:
    """Canonical access token produced by one issuance."""

    access_token: str
    token_type: str
    expires_in: int  # Seconds remaining, frozen at issuance
    expires_at: int  # Absolute expiry (epoch milliseconds)
    scope: str  # Space-joined requested scopes

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TokenRecord:
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type") or DEFAULT_TOKEN_TYPE,
            expires_in=int(data["expires_in"]),
            expires_at=int(data["expires_at"]),
            scope=data.get("scope", ""),
        )

    def is_valid(self, at: int | None = None) -> bool:
        return is_token_valid(self, at=at)


def normalize_token_response(
    raw: Mapping[str, Any],
    scopes: Sequence[str],
    now: int | None = None,
) -> TokenRecord:
    """Turn a raw token response into a TokenRecord.

    ``raw`` carries ``access_token``, an optional ``token_type`` and an
    optional absolute ``expiry_date`` in epoch milliseconds. Without an
    expiry the token is assumed to live for one hour from ``now``.

    Args:
        raw: Token response with an absolute expiry.
        scopes: Requested scopes, in request order.
        now: Current time in epoch milliseconds (defaults to the clock).

    Returns:
        TokenRecord with defaults applied.
    """
    if now is None:
        now = now_ms()

    expiry_date = raw.get("expiry_date")
    if expiry_date:
        expires_at = int(expiry_date)
        expires_in = (expires_at - now) // 1000
    else:
        expires_at = now + DEFAULT_LIFETIME_SECONDS * 1000
        expires_in = DEFAULT_LIFETIME_SECONDS

    return TokenRecord(
        access_token=raw["access_token"],
        token_type=raw.get("token_type") or DEFAULT_TOKEN_TYPE,
        expires_in=expires_in,
        expires_at=expires_at,
        scope=" ".join(scopes),
    )


def _expires_at(record: TokenRecord | Mapping[str, Any] | None) -> int | None:
    if record is None:
        return None
    if isinstance(record, TokenRecord):
        return record.expires_at
    return record.get("expires_at")


def is_token_valid(
    record: TokenRecord | Mapping[str, Any] | None,
    at: int | None = None,
) -> bool:
    """Check whether a token has not yet expired.

    Accepts a TokenRecord or a mapping re-read from a snapshot file.

    Args:
        record: Token to check; None is never valid.
        at: Instant to check against in epoch milliseconds (defaults to now).
    """
    expires_at = _expires_at(record)
    if not expires_at:
        return False
    if at is None:
        at = now_ms()
    return at < expires_at


def remaining_seconds(
    record: TokenRecord | Mapping[str, Any] | None,
    at: int | None = None,
) -> int:
    """Whole seconds left before expiry, zero once expired."""
    expires_at = _expires_at(record)
    if not expires_at:
        return 0
    if at is None:
        at = now_ms()
    return max(0, (expires_at - at) // 1000)


def authorization_value(record: TokenRecord) -> str:
    return f"{record.token_type} {record.access_token}"


def to_postman_headers(record: TokenRecord) -> dict[str, str]:
    """Header object ready to paste into a Postman request."""
    return {
        "Authorization": authorization_value(record),
        "Content-Type": CONTENT_TYPE,
    }


def to_curl_header_args(record: TokenRecord) -> str:
    """cURL ``-H`` arguments carrying the token."""
    return (
        f'-H "Authorization: {authorization_value(record)}" '
        f'-H "Content-Type: {CONTENT_TYPE}"'
    )
