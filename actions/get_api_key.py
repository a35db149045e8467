#!/usr/bin/env python3
"""Exchange Webfry account credentials for an API key.

Prints the key on stdout so it can be pasted into `.env`.

Recommended invocation:
- python -m actions.get_api_key

Env vars (loaded from `.env` if present):
- WEBFRY_EMAIL / WEBFRY_PASSWORD (required unless passed as flags)
- WEBFRY_BASE_URL (optional, default: https://webfry.dev)
- WEBFRY_TIMEOUT_S (optional, default: 15)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from webfry import WebfryClient, WebfryError


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Get a Webfry API key")
    p.add_argument("--email", default=None, help="Account email (default: env)")
    p.add_argument(
        "--password",
        default=None,
        help="Account password (default: env WEBFRY_PASSWORD)",
    )
    p.add_argument(
        "--base-url",
        default=None,
        help="API host (default: env WEBFRY_BASE_URL or https://webfry.dev)",
    )
    p.add_argument(
        "--timeout-s",
        type=float,
        default=None,
        help="HTTP timeout seconds (default: env WEBFRY_TIMEOUT_S or 15)",
    )
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


async def get_api_key(
    email: str,
    password: str,
    *,
    base_url: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> Optional[str]:
    """Reusable helper: log in and return the API key.

    Returns None when the server answers 2xx without an `api_key` string.
    """
    async with WebfryClient(base_url=base_url, timeout_s=timeout_s) as client:
        resp = await client.get_api_key(email=email, password=password)
    if isinstance(resp, dict) and isinstance(resp.get("api_key"), str):
        return resp["api_key"] or None
    return None


def main(argv: List[str]) -> int:
    load_dotenv()

    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    email = (args.email or os.getenv("WEBFRY_EMAIL") or "").strip()
    password = args.password or os.getenv("WEBFRY_PASSWORD") or ""
    if not email or not password:
        print(
            "ERROR: WEBFRY_EMAIL / WEBFRY_PASSWORD not set (check your .env)",
            file=sys.stderr,
        )
        return 2

    try:
        api_key = asyncio.run(
            get_api_key(
                email,
                password,
                base_url=args.base_url,
                timeout_s=args.timeout_s,
            )
        )
    except WebfryError as e:
        print(f"ERROR: Failed to get API key: {e}", file=sys.stderr)
        return 1

    if api_key is None:
        print(
            "ERROR: Failed to get API key: response had no api_key",
            file=sys.stderr,
        )
        return 1

    print(api_key)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
