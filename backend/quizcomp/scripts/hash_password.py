"""Print a bcrypt hash for a password, e.g. to seed an admin row by hand.

Usage:
    python -m quizcomp.scripts.hash_password            # prompts
    python -m quizcomp.scripts.hash_password s3cret
"""

from __future__ import annotations

import argparse
import getpass
import sys

from quizcomp.core.security import get_password_hash


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a bcrypt password hash.")
    parser.add_argument("password", nargs="?", help="password to hash (prompted when omitted)")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("Password must not be empty", file=sys.stderr)
        return 1

    print(get_password_hash(password))
    return 0


if __name__ == "__main__":
    sys.exit(main())
