#!/usr/bin/env python3
"""
issue_token.py — Print a development Bearer token for a user id.

Usage:
    python scripts/issue_token.py seed-author-1
    python scripts/issue_token.py seed-author-1 --hours 2

Signs with JWT_SECRET from the environment / .env, so only use it against
a local API.
"""

import argparse
from datetime import timedelta

from safetrails.core.security import create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("user_id", help="value for the token's sub claim")
    parser.add_argument("--hours", type=int, default=None, help="token lifetime (default: JWT_EXPIRY_HOURS)")
    args = parser.parse_args()

    delta = timedelta(hours=args.hours) if args.hours else None
    print(create_access_token(args.user_id, expires_delta=delta))


if __name__ == "__main__":
    main()
