#!/usr/bin/env python3
"""
Remove notifications whose expiry time has passed.

Expired rows are already hidden from every notification query; this sweep
deletes them for good. Run it periodically (cron, systemd timer).

Usage:
  ./venv/bin/python scripts/purge_expired_notifications.py --env production
"""

from __future__ import annotations

import argparse

from campusconnect import create_app
from campusconnect.services import NotificationService


def run(env: str | None) -> int:
    app = create_app(env)
    with app.app_context():
        removed = NotificationService.purge_expired()
        app.logger.info("Purged %s expired notifications", removed)
    return removed


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--env", default=None, help="Config name (defaults to FLASK_ENV)")
    args = parser.parse_args()
    removed = run(args.env)
    print(f"Removed {removed} expired notifications.")


if __name__ == "__main__":
    main()
