#!/usr/bin/env python
"""
Deactivate bans whose expiry has passed.

The API process runs the same sweep on a timer; this script is for
deployments that disable the in-process scheduler.

Can be run via:
- Cron: */15 * * * * cd /path/to/backend && python scripts/sweep_expired_bans.py
- Manual: python scripts/sweep_expired_bans.py --dry-run

Options:
    --dry-run: Count expired active bans without changing them
"""

import argparse
import sys
from pathlib import Path

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger
from sqlalchemy.orm import Session

from helpers.time_utils import utc_now
from models.exceptions import StoreException
from repositories.database import SessionLocal
from repositories.db_models import Ban
from services.ban_service import BanService


def main(argv: list[str] | None = None) -> int:
    """Run the ban sweep."""
    parser = argparse.ArgumentParser(description="Deactivate expired bans")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show how many bans would be deactivated",
    )
    args = parser.parse_args(argv)

    db: Session = SessionLocal()
    try:
        if args.dry_run:
            count = (
                db.query(Ban)
                .filter(
                    Ban.is_active.is_(True),
                    Ban.expires_at.isnot(None),
                    Ban.expires_at <= utc_now(),
                )
                .count()
            )
            logger.info(f"[DRY RUN] Would deactivate {count} expired bans")
        else:
            count = BanService.deactivate_expired_bans(db)
            logger.info(f"Deactivated {count} expired bans")
        return 0
    except StoreException as e:
        logger.error(f"Ban sweep failed: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
