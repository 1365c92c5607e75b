#!/usr/bin/env python3
"""
Send deadline reminders for open and in-progress resource requests.

Every request whose deadline falls within the next --hours hours gets one
deadline_reminder notification for its requester. Schedule the script at
the same interval as --hours to avoid duplicate reminders.

Usage:
  ./venv/bin/python scripts/send_deadline_reminders.py --hours 24
"""

from __future__ import annotations

import argparse

from campusconnect import create_app
from campusconnect.services import RequestService


def run(env: str | None, hours: int) -> int:
    app = create_app(env)
    with app.app_context():
        return RequestService.remind_upcoming_deadlines(hours=hours)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--env", default=None, help="Config name (defaults to FLASK_ENV)")
    parser.add_argument("--hours", type=int, default=24, help="Look-ahead window in hours")
    args = parser.parse_args()
    if args.hours < 1:
        parser.error("--hours must be at least 1")
    sent = run(args.env, args.hours)
    print(f"Sent {sent} deadline reminders.")


if __name__ == "__main__":
    main()
