#!/usr/bin/env python3
"""
Seed the default achievement catalogue.

Existing achievements (matched by name) are left untouched, so the script
is safe to re-run.

Usage:
  ./venv/bin/python scripts/seed_achievements.py --env development
"""

from __future__ import annotations

import argparse

from campusconnect import create_app
from campusconnect.models import Achievement
from campusconnect.services import AchievementService

DEFAULT_ACHIEVEMENTS = [
    {
        "name": "First Upload",
        "description": "Upload your first resource",
        "icon": "📚",
        "type": "upload",
        "criteria": {"count": 1},
        "points": 10,
        "rarity": "common",
    },
    {
        "name": "Helpful Contributor",
        "description": "Upload 10 resources",
        "icon": "🌟",
        "type": "upload",
        "criteria": {"count": 10},
        "points": 50,
        "rarity": "uncommon",
    },
    {
        "name": "Study Group Leader",
        "description": "Create your first study group",
        "icon": "👥",
        "type": "study_group",
        "criteria": {"count": 1},
        "points": 15,
        "rarity": "common",
    },
    {
        "name": "Popular Resource",
        "description": "Get 50 likes on a resource",
        "icon": "❤️",
        "type": "like",
        "criteria": {"count": 50},
        "points": 30,
        "rarity": "rare",
    },
]


def seed() -> list[str]:
    created = []
    for payload in DEFAULT_ACHIEVEMENTS:
        if Achievement.query.filter_by(name=payload["name"]).first():
            continue
        AchievementService.create_achievement(payload)
        created.append(payload["name"])
    return created


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--env", default=None, help="Config name (defaults to FLASK_ENV)")
    args = parser.parse_args()

    app = create_app(args.env)
    with app.app_context():
        created = seed()
    if created:
        print("Created achievements: " + ", ".join(created))
    else:
        print("Achievement catalogue already seeded.")


if __name__ == "__main__":
    main()
