"""
One-off script: mint an access/refresh pair for a user id.

Uses the current JWT_KEY / JWT_TIMEOUT_SECONDS from the environment (.env).
Run from the backend directory:
    python issue_token.py 42
"""
from __future__ import annotations

import argparse
import sys

from msgboard.core.settings import settings
from msgboard.core.tokens import TokenConfig, TokenError, TokenIssuer


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Issue a token pair for a user id")
    parser.add_argument("uid", type=int, help="user id to embed in the tokens")
    args = parser.parse_args(argv)

    issuer = TokenIssuer(TokenConfig.from_settings(settings))
    try:
        pair = issuer.issue_pair(args.uid)
    except TokenError as e:
        print(f"Cannot issue tokens: {e}", file=sys.stderr)
        return 1

    print(f"access_token:  {pair.access_token}")
    print(f"refresh_token: {pair.refresh_token}")
    print(f'\nAuthorization: Bearer {pair.access_token}')
    return 0


if __name__ == "__main__":
    sys.exit(main())
