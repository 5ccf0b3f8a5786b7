"""Registry of known bots and their lifetime contribution counters."""

from __future__ import annotations

import bittensor as bt
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from drandledger.base.utils import short_address
from drandledger.database.manager import LedgerDatabase
from drandledger.database.schema import BotRow, SubmissionOrderRow
from drandledger.errors import BotNotFound

from .models import Bot, QueriedBot


def _to_queried(row: BotRow) -> QueriedBot:
    return QueriedBot.make(Bot(moniker=row.moniker, rounds_added=row.rounds_added), row.address)


class BotRegistry:
    """Display names and ``rounds_added`` counters, keyed by address.

    ``rounds_added`` only ever grows: it is bumped once per round in which
    the bot obtained an arrival rank. It can be recomputed from the
    submission order table with ``rebuild_rounds_added``.
    """

    def __init__(self, database: LedgerDatabase):
        self.database = database

    def note_contribution(
        self,
        bot: str,
        moniker_if_new: str = "",
        session: Session | None = None,
    ) -> QueriedBot:
        """Count one more contributed round for ``bot``, creating it if unknown."""
        with self.database.scope(session) as s:
            row = s.get(BotRow, bot)
            if row is None:
                row = BotRow(address=bot, moniker=moniker_if_new, rounds_added=0)
                s.add(row)
                s.flush()
                bt.logging.info({"bot_registry": {"event": "bot_created", "bot": short_address(bot), "moniker": moniker_if_new}})
            # Increment in SQL; writers on other rounds may bump the same bot concurrently
            s.execute(
                update(BotRow)
                .where(BotRow.address == bot)
                .values(rounds_added=BotRow.rounds_added + 1)
                .execution_options(synchronize_session=False)
            )
            s.refresh(row)
            return _to_queried(row)

    def register(self, bot: str, moniker: str, session: Session | None = None) -> QueriedBot:
        """Create a bot or change its moniker. Keeps ``rounds_added``."""
        with self.database.scope(session) as s:
            row = s.get(BotRow, bot)
            if row is None:
                row = BotRow(address=bot, moniker=moniker, rounds_added=0)
                s.add(row)
            else:
                row.moniker = moniker
            s.flush()
            bt.logging.info({"bot_registry": {"event": "registered", "bot": short_address(bot), "moniker": moniker}})
            return _to_queried(row)

    def get(self, bot: str, session: Session | None = None) -> QueriedBot:
        with self.database.scope(session) as s:
            row = s.get(BotRow, bot)
            if row is None:
                raise BotNotFound(bot)
            return _to_queried(row)

    def list(self, session: Session | None = None) -> list[QueriedBot]:
        """All known bots ordered by address."""
        with self.database.scope(session) as s:
            return [_to_queried(row) for row in s.scalars(select(BotRow).order_by(BotRow.address))]

    def rebuild_rounds_added(self, session: Session | None = None) -> dict[str, int]:
        """Recompute every ``rounds_added`` from the submission order table.

        Bots missing from the registry are created with an empty moniker.
        Returns address -> (new - old) for every counter that changed.
        """
        stmt = (
            select(SubmissionOrderRow.bot, func.count(func.distinct(SubmissionOrderRow.round)))
            .group_by(SubmissionOrderRow.bot)
        )
        changed: dict[str, int] = {}
        with self.database.scope(session) as s:
            counts = {bot: int(n) for bot, n in s.execute(stmt).all()}
            rows = {row.address: row for row in s.scalars(select(BotRow))}

            for address in sorted(set(counts) | set(rows)):
                expected = counts.get(address, 0)
                row = rows.get(address)
                if row is None:
                    row = BotRow(address=address, moniker="", rounds_added=0)
                    s.add(row)
                if row.rounds_added != expected:
                    changed[address] = expected - row.rounds_added
                    row.rounds_added = expected
            s.flush()

        bt.logging.info({"bot_registry": {"event": "rebuilt", "bots": len(counts), "changed": len(changed)}})
        return changed


__all__ = ["BotRegistry"]
