"""
Log in against the backend and print the issued token pair.

Basic usage:
  auth-get-token --base-url http://localhost:8000 --email a@x.com --password pw123

Optional environment variables:
  - API_BASE_URL   (e.g. http://localhost:8000)
  - API_EMAIL      (user email)
  - API_PASSWORD   (user password)

The full token pair is also written as JSON to --out (default: token.json).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from auth_service.client.session import AuthSession


async def fetch_tokens(base_url: str, email: str, password: str,
                       client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """Log in and return the token pair as a JSON-ready dict.

    Raises:
        RuntimeError: If the backend rejects the login or cannot be reached.
    """
    try:
        async with AuthSession(base_url, client=client) as session:
            result = await session.login(email, password)
    except httpx.HTTPStatusError as e:
        try:
            detail = e.response.json().get("detail")
        except ValueError:
            detail = e.response.text
        raise RuntimeError(f"HTTP {e.response.status_code} on login: {detail}") from e
    except httpx.RequestError as e:
        raise RuntimeError(f"Could not reach backend at {base_url}: {e}") from e
    return result.tokens.model_dump(mode="json")


def save_json(data: Dict[str, Any], out_path: str) -> None:
    """Write the dict as JSON, creating the parent folder if needed."""
    out_file = Path(out_path)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Obtain a JWT token pair from the backend")
    parser.add_argument(
        "--base-url",
        default=os.getenv("API_BASE_URL", "http://localhost:8000"),
        help="Backend base URL (e.g. http://localhost:8000)",
    )
    parser.add_argument("--email", default=os.getenv("API_EMAIL"), help="User email")
    parser.add_argument("--password", default=os.getenv("API_PASSWORD"), help="User password")
    parser.add_argument("--out", default="token.json", help="Where to save the token JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if not args.email or not args.password:
        print("Email and password are required (flags or API_EMAIL/API_PASSWORD).", file=sys.stderr)
        return 2

    print(f"-> Logging in at {args.base_url} as {args.email}...")
    try:
        tokens = asyncio.run(fetch_tokens(args.base_url, args.email, args.password))
    except RuntimeError as e:
        print(str(e), file=sys.stderr)
        return 1

    print("\nLogin OK. Tokens received:")
    print(f"  access_token: {tokens['access_token']}")
    print(f"  refresh_token: {tokens['refresh_token']}")
    print(f"  expires_in: {tokens['expires_in']} seconds")

    save_json(tokens, args.out)
    print(f"\nFull response saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
