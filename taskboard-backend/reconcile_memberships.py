"""
Repair team membership drift.

Recomputes every user's team reference from the team member lists (the
source of truth) and drops users listed on more than one team from all but
the most recently updated one.

Run this from the backend root:

    (.venv) python reconcile_memberships.py
    (.venv) python reconcile_memberships.py --purge-tokens
"""

import argparse
import logging

from app.core.config import settings
from app.core.logging_setup import setup_logging
from app.db.session import SessionLocal
from app.services.auth_service import purge_expired_tokens
from app.services.team_service import reconcile_memberships

logger = logging.getLogger("reconcile_memberships")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "--purge-tokens",
        action="store_true",
        help="also delete revocation records of expired tokens",
    )
    args = parser.parse_args()

    setup_logging(settings.log_level)
    db = SessionLocal()
    try:
        report = reconcile_memberships(db)
        if report.changed:
            logger.info(
                "Relinked %d, cleared %d, dropped %d duplicate listings",
                len(report.relinked), len(report.cleared), len(report.dropped),
            )
        else:
            logger.info("Memberships consistent, nothing to do")

        if args.purge_tokens:
            logger.info("Purged %d expired revoked tokens", purge_expired_tokens(db))
    finally:
        db.close()


if __name__ == "__main__":
    main()
