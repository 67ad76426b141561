"""Command-line entry point: generate a Firebase OAuth 2.0 access token."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime

from firebase_token.config import AppConfig, load_config
from firebase_token.credentials import load_service_account
from firebase_token.exceptions import CredentialReadError, TokenGeneratorError
from firebase_token.issuer import IssuerConfig, TokenIssuer
from firebase_token.storage import build_snapshot, ensure_directory, load_snapshot, save_snapshot
from firebase_token.token import (
    TokenRecord,
    is_token_valid,
    remaining_seconds,
    to_curl_header_args,
    to_postman_headers,
)

LOG_LEVEL_ENV = "FIREBASE_TOKEN_LOG_LEVEL"

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="firebase-token",
        description="Generate an OAuth 2.0 access token from a Firebase service account",
    )
    p.add_argument("--config", help="Path to config.json (default: config/config.json)")
    p.add_argument("--service-account", help="Path to the service account JSON key")
    p.add_argument("--output-dir", help="Directory the token file is written to")
    p.add_argument(
        "--scope",
        action="append",
        dest="scopes",
        help="OAuth scope to request; repeat for several (default: from config)",
    )
    p.add_argument("--check", action="store_true", help="Only report the status of the saved token")
    p.add_argument("--list-scopes", action="store_true", help="List scopes available in the config")
    p.add_argument(
        "--log-level",
        default=os.getenv(LOG_LEVEL_ENV, "INFO"),
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or INFO)",
    )
    return p.parse_args(argv)


def display_token_info(record: TokenRecord) -> None:
    expires_at = datetime.fromtimestamp(record.expires_at / 1000)
    print()
    print("Firebase OAuth 2.0 Access Token")
    print("================================================")
    print(f"Access Token: {record.access_token[:50]}...")
    print(f"Token Type:   {record.token_type}")
    print(f"Expires In:   {record.expires_in} seconds ({record.expires_in // 60} minutes)")
    print(f"Expires At:   {expires_at:%Y-%m-%d %H:%M:%S}")
    print(f"Scope:        {record.scope}")
    print("================================================")
    print()


def report_existing_token(config: AppConfig) -> bool:
    """Print the status of the saved token. Returns False if there is none."""
    snapshot = load_snapshot(config.token_file_path)
    if snapshot is None:
        logger.info("No saved token at %s", config.token_file_path)
        return False

    print("Saved token status:")
    if is_token_valid(snapshot):
        print(f"  valid ({remaining_seconds(snapshot)} seconds remaining)")
    else:
        print("  expired")
    return True


def validate_environment(config: AppConfig) -> None:
    logger.info("Checking environment")
    if not os.path.exists(config.service_account_path):
        raise CredentialReadError(
            f"Service account file not found: {config.service_account_path}",
            path=config.service_account_path,
        )
    ensure_directory(config.output_dir)


def generate_token(config: AppConfig, issuer: TokenIssuer) -> dict:
    """Issue a token, print its formats and persist the snapshot."""
    credential = load_service_account(config.service_account_path)
    credential.require_complete()
    logger.info("Generating Firebase OAuth token")
    record = issuer.issue(credential, config.default_scopes)
    display_token_info(record)

    postman_headers = to_postman_headers(record)
    curl_headers = to_curl_header_args(record)
    print("Postman headers:")
    print(json.dumps(postman_headers, indent=2))
    print()
    print("cURL headers:")
    print(curl_headers)
    print()

    snapshot = build_snapshot(
        record,
        scopes=config.default_scopes,
        service_account_path=config.service_account_path,
        app_name=config.app_name,
        app_version=config.app_version,
    )
    save_snapshot(config.token_file_path, snapshot, pretty_print=config.pretty_print)
    print(f"Token saved to {config.token_file_path}")
    return snapshot


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config).with_overrides(
            service_account_path=args.service_account,
            output_dir=args.output_dir,
            scopes=args.scopes,
        )

        if args.list_scopes:
            for scope in config.available_scopes or config.default_scopes:
                marker = "*" if scope in config.default_scopes else " "
                print(f"{marker} {scope}")
            return 0

        if args.check:
            return 0 if report_existing_token(config) else 1

        print(f"{config.app_name} v{config.app_version}")
        print("================================================")
        report_existing_token(config)
        validate_environment(config)
        with TokenIssuer(IssuerConfig(timeout=config.timeout)) as issuer:
            generate_token(config, issuer)
    except TokenGeneratorError as e:
        logger.error("%s", e.message)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
