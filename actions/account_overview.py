#!/usr/bin/env python3
"""Show the Webfry account's plan and usage, optionally rating a password.

Recommended invocation:
- python -m actions.account_overview
- python -m actions.account_overview --password 'MyPassword123!'

Env vars (loaded from `.env`):
- WEBFRY_API_KEY (required)
- WEBFRY_BASE_URL (optional, default: https://webfry.dev)
- WEBFRY_TIMEOUT_S (optional, default: 15)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from webfry import WebfryClient, WebfryError


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Show Webfry plan and usage")
    p.add_argument(
        "--password",
        default=None,
        help="Also run a strength check on this password (optional)",
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Print raw JSON responses",
    )
    p.add_argument(
        "--timeout-s",
        type=float,
        default=None,
        help="HTTP timeout seconds (default: env WEBFRY_TIMEOUT_S or 15)",
    )
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def _format_usage(info: Dict[str, Any]) -> str:
    limit = info.get("max_usage_for_plan")
    usage = info.get("api_usage")
    if limit is None:
        return f"{usage} (unlimited)"
    return f"{usage}/{limit}"


async def _collect(
    client: WebfryClient, password: Optional[str]
) -> Dict[str, Any]:
    out: Dict[str, Any] = {"user_info": await client.user_info()}
    if password:
        out["password_check"] = await client.password_check(password)
    return out


def main(argv: List[str]) -> int:
    load_dotenv()

    args = _parse_args(argv)

    api_key = os.getenv("WEBFRY_API_KEY")
    if not api_key:
        print("ERROR: WEBFRY_API_KEY not set (check your .env)", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    async def run() -> Dict[str, Any]:
        async with WebfryClient(api_key, timeout_s=args.timeout_s) as client:
            return await _collect(client, args.password)

    try:
        results = asyncio.run(run())
    except WebfryError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(results, indent=2, sort_keys=True, ensure_ascii=False))
        return 0

    info = results["user_info"]
    if not isinstance(info, dict):
        print(
            "ERROR: Unexpected user_info response: " + repr(info),
            file=sys.stderr,
        )
        return 1

    print(f"email:    {info.get('email')}")
    print(f"plan:     {info.get('plan')}")
    print(f"usage:    {_format_usage(info)}")
    print(f"paid to:  {info.get('paid_until') or '-'}")

    if "password_check" not in results:
        return 0

    strength = results["password_check"]
    if not isinstance(strength, dict):
        print(
            "ERROR: Unexpected password_check response: " + repr(strength),
            file=sys.stderr,
        )
        return 1

    print("-")
    print(f"strength: {strength.get('label')} (score {strength.get('score')})")
    feedback = strength.get("feedback")
    for line in feedback if isinstance(feedback, list) else []:
        print(f"  * {line}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
