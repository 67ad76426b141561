"""Token snapshot persistence."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Sequence

from firebase_token.exceptions import PersistenceError
from firebase_token.token import (
    TokenRecord,
    is_token_valid,
    to_curl_header_args,
    to_postman_headers,
)

logger = logging.getLogger(__name__)


def ensure_directory(path: str) -> None:
    """Create a directory (and parents) if it does not exist."""
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"Output directory could not be created ({path}): {e}", path=path) from e


def read_json_file(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise PersistenceError(f"JSON file could not be read ({path}): {e}", path=path) from e


def write_json_file(path: str, data: Any, pretty_print: bool = True) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2 if pretty_print else None, ensure_ascii=False)
    except (OSError, TypeError) as e:
        raise PersistenceError(f"JSON file could not be written ({path}): {e}", path=path) from e


def _isoformat(moment: datetime) -> str:
    # Millisecond precision with a Z suffix, e.g. 2024-01-15T10:30:00.000Z
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_snapshot(
    record: TokenRecord,
    scopes: Sequence[str],
    service_account_path: str,
    app_name: str,
    app_version: str,
    generated_at: datetime | None = None,
    now: int | None = None,
) -> dict:
    """Assemble the persisted token document.

    ``is_valid`` is evaluated at build time; ``expires_in`` keeps the value
    frozen at issuance.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        **record.to_dict(),
        "generated_at": _isoformat(generated_at),
        "config": {
            "scopes": list(scopes),
            "service_account_path": service_account_path,
        },
        "formats": {
            "postman_headers": to_postman_headers(record),
            "curl_headers": to_curl_header_args(record),
        },
        "metadata": {
            "app_name": app_name,
            "app_version": app_version,
            "is_valid": is_token_valid(record, at=now),
        },
    }


def save_snapshot(path: str, snapshot: dict, pretty_print: bool = True) -> None:
    """Write a snapshot, replacing any previous one at ``path``."""
    write_json_file(path, snapshot, pretty_print=pretty_print)
    logger.info("Token snapshot written to %s", path)


def load_snapshot(path: str) -> dict | None:
    """Read a previously written snapshot, or None if there is none."""
    if not os.path.exists(path):
        return None
    data = read_json_file(path)
    if not isinstance(data, dict):
        raise PersistenceError(f"Token file does not contain a JSON object: {path}", path=path)
    return data
