"""Token issuer exchanging a service account assertion for an access token."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

import google.auth.exceptions
import google.auth.transport.requests
import requests
from google.oauth2 import service_account

from firebase_token.credentials import ServiceAccountCredential
from firebase_token.exceptions import TokenIssuanceError
from firebase_token.token import TokenRecord, normalize_token_response, now_ms

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ["https://www.googleapis.com/auth/firebase.messaging"]


@dataclass
class IssuerConfig:
    """Configuration for the token issuer."""

    timeout: float = 30.0


def _epoch_ms(moment: datetime) -> int:
    # google-auth reports expiry as a naive UTC datetime
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


class TokenIssuer:
    """Obtains OAuth 2.0 access tokens for a service account.

    Signing the JWT assertion and the JWT-bearer exchange are done by
    google-auth; this class turns the result into a TokenRecord.

    Example:
        >>> credential = load_service_account("config/service-account.json")
        >>> with TokenIssuer() as issuer:
        ...     record = issuer.issue(credential, DEFAULT_SCOPES)
        >>> print(to_curl_header_args(record))
    """

    def __init__(
        self,
        config: IssuerConfig | None = None,
        clock: Callable[[], int] = now_ms,
        request: Callable[..., Any] | None = None,
    ) -> None:
        """Initialize the issuer.

        Args:
            config: Issuer configuration. Uses defaults if not provided.
            clock: Returns the current time in epoch milliseconds.
            request: google-auth transport request. Built on a requests
                session if not provided.
        """
        self.config = config or IssuerConfig()
        self._clock = clock
        self._request = request
        self._session: requests.Session | None = None

    def _get_request(self) -> Callable[..., Any]:
        """Get or create the transport request."""
        if self._request is None:
            self._session = requests.Session()
            self._request = functools.partial(
                google.auth.transport.requests.Request(session=self._session),
                timeout=self.config.timeout,
            )
        return self._request

    def authorize(
        self,
        credential: ServiceAccountCredential,
        scopes: Sequence[str],
        subject: str | None = None,
    ) -> dict[str, Any]:
        """Run the JWT-bearer grant and return the raw token.

        The raw token carries ``access_token`` and, when the endpoint
        reported a lifetime, an absolute ``expiry_date`` in epoch ms.

        Raises:
            TokenIssuanceError: On a malformed key, network failure or a
                rejected grant.
        """
        try:
            credentials = service_account.Credentials.from_service_account_info(
                credential.to_dict(),
                scopes=list(scopes),
                subject=subject,
            )
            credentials.refresh(self._get_request())
        except google.auth.exceptions.GoogleAuthError as e:
            details = e.args[1] if len(e.args) > 1 and isinstance(e.args[1], dict) else {}
            raise TokenIssuanceError(f"Token could not be obtained: {e}", details=details) from e
        except (ValueError, TypeError) as e:
            # Unparsable key material or a malformed token response
            raise TokenIssuanceError(f"Token could not be obtained: {e}") from e

        raw = {"access_token": credentials.token}
        if credentials.expiry is not None:
            raw["expiry_date"] = _epoch_ms(credentials.expiry)
        return raw

    def issue(
        self,
        credential: ServiceAccountCredential,
        scopes: Sequence[str],
        subject: str | None = None,
    ) -> TokenRecord:
        """Obtain an access token for the service account.

        Args:
            credential: A complete service account credential.
            scopes: Requested scopes; joined with spaces in the record.
            subject: Optional user to impersonate (domain-wide delegation).

        Returns:
            TokenRecord for the new token.

        Raises:
            TokenIssuanceError: If signing or the exchange fails.
        """
        scopes = list(scopes)
        if not scopes:
            raise TokenIssuanceError("Token could not be obtained: no scopes requested")

        logger.info("Requesting access token for %s", credential.client_email)
        raw = self.authorize(credential, scopes, subject=subject)

        record = normalize_token_response(raw, scopes, now=self._clock())
        logger.info("Access token issued, expires in %s seconds", record.expires_in)
        return record

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            self._session.close()
            self._session = None
            self._request = None

    def __enter__(self) -> TokenIssuer:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def issue_token(
    credential: ServiceAccountCredential,
    scopes: Sequence[str] | None = None,
    timeout: float = 30.0,
) -> TokenRecord:
    """Issue a token with minimal configuration.

    Example:
        >>> record = issue_token(load_service_account("service-account.json"))
    """
    with TokenIssuer(config=IssuerConfig(timeout=timeout)) as issuer:
        return issuer.issue(credential, scopes or DEFAULT_SCOPES)
