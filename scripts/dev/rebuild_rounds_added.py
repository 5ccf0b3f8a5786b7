"""Recompute every bot's rounds_added from the submission order table.

rounds_added is authoritative during normal operation, but it is fully
derivable from submission_order (one increment per round a bot ranked
in). Use this after restoring a database from backup.

Usage:
    python scripts/dev/rebuild_rounds_added.py --ledger.database_url sqlite:///drand_ledger.db
    python scripts/dev/rebuild_rounds_added.py --ledger.database_url sqlite:///drand_ledger.db --dry-run
"""

from __future__ import annotations

import argparse
import sys

import bittensor as bt
from sqlalchemy.orm import Session

from drandledger.base.config import add_args, config_from_args
from drandledger.database.manager import LedgerDatabase
from drandledger.ledger.bots import BotRegistry


def main() -> None:
    parser = argparse.ArgumentParser(description="Rebuild bot rounds_added counters")
    add_args(parser)
    parser.add_argument("--dry-run", action="store_true", help="Report differences without writing")
    args = parser.parse_args()

    config = config_from_args(args)
    database = LedgerDatabase(config.database_url)
    database.create_all()
    registry = BotRegistry(database)

    try:
        # Closing the session without commit discards a dry run
        with Session(database.engine) as session:
            changed = registry.rebuild_rounds_added(session=session)
            if not args.dry_run:
                session.commit()
    finally:
        database.dispose()

    if not changed:
        print("All rounds_added counters match submission order.")
        return

    print(f"{'bot':<50} {'delta':>8}")
    for address, delta in changed.items():
        print(f"{address:<50} {delta:>+8}")
    if args.dry_run:
        print("Dry run: no changes written.")
    else:
        bt.logging.info({"rebuild_rounds_added": {"changed": len(changed)}})


if __name__ == "__main__":
    sys.exit(main())
