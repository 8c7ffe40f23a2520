"""Mint a temporary access URL for an object key without going through the API.

Uses SIGNING_SECRET (and PUBLIC_BASE_URL) from the environment / .env, so the URL is
accepted by any gateway instance sharing that secret.

Usage:
    python -m cdn_gateway.scripts.mint_temp_url covers/cover.png --expires-in 600
    python -m cdn_gateway.scripts.mint_temp_url covers/cover.png --base-url https://cdn.example.com
"""
from __future__ import annotations

import argparse
import sys

from cdn_gateway.core.config import get_settings
from cdn_gateway.core.security import TokenCodec
from cdn_gateway.services.capability import CapabilityURLService


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Mint a temporary access URL for an object key.")
    parser.add_argument("key", help="Object key, e.g. covers/cover.png")
    parser.add_argument(
        "--expires-in",
        type=int,
        default=settings.temp_url_ttl_seconds,
        help=f"Lifetime in seconds (default: {settings.temp_url_ttl_seconds})",
    )
    parser.add_argument("--base-url", default=settings.public_base_url, help="Public base URL of the gateway")
    args = parser.parse_args(argv)

    if not args.base_url:
        print("Error: --base-url or PUBLIC_BASE_URL is required", file=sys.stderr)
        return 1
    if settings.has_placeholder_secret():
        print("Warning: SIGNING_SECRET is not set; the URL is signed with the placeholder secret", file=sys.stderr)

    service = CapabilityURLService(TokenCodec(settings.signing_secret))
    minted = service.issue(args.key, args.expires_in, args.base_url.rstrip("/"))
    print(minted.url)
    print(f"expires={minted.expires}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
