"""
Achievement Seed Script

Validates the achievement catalog and seeds the progression database with:
- Schema (user_progress, achievement_progress, expiration_predictions)
- Demo users
- Replayed demo activity (saved and scanned items, daily streaks)

Optionally exports the validated catalog as JSON so it can be edited and
loaded back through ACHIEVEMENT_CATALOG_PATH.
"""

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional

from shelfwise.config import get_settings
from shelfwise.exceptions import CatalogConfigurationError, InvalidInputError
from shelfwise.logging_config import setup_logging
from shelfwise.services.achievement_catalog import (
    AchievementCatalog,
    default_achievement_catalog,
    load_achievement_catalog,
)
from shelfwise.services.gamification_service import GamificationService
from shelfwise.services.sustainability_service import SustainabilityService
from shelfwise.shared.database import create_database_engine, init_database, session_factory
from shelfwise.shared.repositories import SqlAchievementProgressStore, SqlUserProgressRepository

# ==============================================
# SAMPLE DATA
# ==============================================

DEMO_USERS = [
    {"user_id": "demo-user", "name": "Demo User", "active_days": 8, "saved_per_day": 2, "scanned_per_day": 2},
    {"user_id": "john", "name": "John Smith", "active_days": 3, "saved_per_day": 1, "scanned_per_day": 4},
    {"user_id": "priya", "name": "Priya Patel", "active_days": 5, "saved_per_day": 3, "scanned_per_day": 1},
]

# Saved items are assumed to be used this many days before expiring
DEMO_DAYS_EARLY = 3


def load_catalog(path: Optional[str]) -> AchievementCatalog:
    if path:
        return load_achievement_catalog(path)
    return default_achievement_catalog()


def export_catalog(catalog: AchievementCatalog, path: str) -> None:
    payload = {"achievements": [asdict(definition) for definition in catalog]}
    Path(path).write_text(json.dumps(payload, indent=2), encoding="utf-8")


def seed_users(
    users: SqlUserProgressRepository,
    service: GamificationService,
    start: date,
) -> List[str]:
    """Create demo users and replay their activity day by day."""
    sustainability = SustainabilityService()
    seeded = []

    for demo in DEMO_USERS:
        try:
            users.create(demo["user_id"], demo["name"])
        except InvalidInputError:
            print(f"[-] {demo['user_id']} already exists, skipping")
            continue

        with users.locked(demo["user_id"]) as progress:
            for offset in range(demo["active_days"]):
                day = start + timedelta(days=offset)
                for _ in range(demo["scanned_per_day"]):
                    service.record_item_scanned(progress, today=day)
                for _ in range(demo["saved_per_day"]):
                    co2 = sustainability.co2_saved(1, day + timedelta(days=DEMO_DAYS_EARLY), day)
                    service.record_item_saved(progress, co2_kg=co2, today=day)

        seeded.append(demo["user_id"])

    return seeded


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate and seed the achievement catalog")
    parser.add_argument("--catalog", help="Achievement catalog JSON (default: settings or built-in)")
    parser.add_argument("--export", metavar="PATH", help="Write the validated catalog to PATH")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument("--skip-users", action="store_true", help="Only validate/export the catalog")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main seeding function"""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    print("=" * 60)
    print("  Shelfwise Achievement Seeding Script")
    print("=" * 60)
    print()

    print("[STEP] Validating achievement catalog...")
    try:
        catalog = load_catalog(args.catalog or settings.ACHIEVEMENT_CATALOG_PATH)
    except CatalogConfigurationError as e:
        print(f"[✗] {e}")
        return 1
    print(f"[✓] {len(catalog)} achievements in families: {', '.join(catalog.types())}")

    if args.export:
        export_catalog(catalog, args.export)
        print(f"[✓] Catalog exported to {args.export}")

    if args.skip_users:
        return 0

    print("\n[STEP] Creating schema...")
    engine = create_database_engine(args.database_url or settings.DATABASE_URL)
    init_database(engine)
    factory = session_factory(engine)

    try:
        users = SqlUserProgressRepository(factory)
        service = GamificationService(
            catalog=catalog,
            store=SqlAchievementProgressStore(factory),
            leaderboard_limit=settings.LEADERBOARD_DEFAULT_LIMIT,
        )

        print("\n[STEP] Seeding demo users...")
        start = date.today() - timedelta(days=max(d["active_days"] for d in DEMO_USERS))
        seeded = seed_users(users, service, start)
        print(f"[✓] Seeded {len(seeded)} users")

        print("\n[STEP] Leaderboard")
        for row in service.leaderboard(users.all()):
            print(
                f"  {row['rank']:>2}. {row['name']:<15} level {row['level']:<3} "
                f"{row['experience_points']:>6} XP  {row['total_co2_saved_kg']:>6} kg CO2"
            )
    finally:
        engine.dispose()

    print("\n" + "=" * 60)
    print("  ACHIEVEMENTS SEEDED SUCCESSFULLY")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
