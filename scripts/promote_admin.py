#!/usr/bin/env python3
"""
Grant the admin role to an existing account.

Registration only ever creates student accounts; this is how the first
administrator is made.

Usage:
  ./venv/bin/python scripts/promote_admin.py --email admin@university.edu
"""

from __future__ import annotations

import argparse
import sys

from campusconnect import create_app
from campusconnect.extensions import db
from campusconnect.models import User


def promote(email: str) -> bool:
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None:
        return False
    user.role = "admin"
    db.session.commit()
    return True


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True, help="Email of the account to promote")
    parser.add_argument("--env", default=None, help="Config name (defaults to FLASK_ENV)")
    args = parser.parse_args()

    app = create_app(args.env)
    with app.app_context():
        promoted = promote(args.email)
    if not promoted:
        print(f"No user with email {args.email}.")
        sys.exit(1)
    print(f"{args.email} is now an admin.")


if __name__ == "__main__":
    main()
