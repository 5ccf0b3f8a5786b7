"""Per-round arrival bookkeeping.

Two tables back this component: ``submission`` answers "did bot B submit
round R" by primary key, ``submission_order`` holds the ranked view
(round, idx) -> bot. Both are written in the same transaction, so the
set of bots in either table is always the same for a given round.
"""

from __future__ import annotations

import bittensor as bt
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from drandledger.base.utils import short_address
from drandledger.database.manager import LedgerDatabase
from drandledger.database.schema import SubmissionOrderRow, SubmissionRow
from drandledger.drand.rounds import check_round
from drandledger.errors import SubmissionNotFound

from .models import (
    QueriedSubmission,
    StoredSubmission,
    SubmissionReceipt,
    SubmissionsResponse,
)


class SubmissionTracker:
    """Records which bots submitted a round, and in which order."""

    def __init__(self, database: LedgerDatabase):
        self.database = database

    def record_submission(
        self,
        round: int,
        bot: str,
        now: int,
        session: Session | None = None,
    ) -> SubmissionReceipt:
        """Record the arrival of ``bot`` for ``round``.

        Arrival order is call order; ``now`` is stored but never used for
        ranking. A repeated submission returns the existing rank with
        ``is_new=False`` and writes nothing.
        """
        check_round(round)
        receipt_time = StoredSubmission(time=now).time

        with self.database.scope(session, round) as s:
            if s.get(SubmissionRow, (round, bot)) is not None:
                rank = self._rank(s, round, bot)
                bt.logging.debug({"submission_tracker": {"event": "resubmission", "round": round, "bot": short_address(bot), "rank": rank}})
                return SubmissionReceipt(rank=rank, is_new=False)

            rank = self._count(s, round)
            s.add(SubmissionRow(round=round, bot=bot, time=receipt_time))
            s.add(SubmissionOrderRow(round=round, idx=rank, bot=bot))
            s.flush()
            bt.logging.debug({"submission_tracker": {"event": "recorded", "round": round, "bot": short_address(bot), "rank": rank}})
            return SubmissionReceipt(rank=rank, is_new=True)

    def rank_of(self, round: int, bot: str, session: Session | None = None) -> int:
        check_round(round)
        with self.database.scope(session, round) as s:
            return self._rank(s, round, bot)

    def count(self, round: int, session: Session | None = None) -> int:
        """Number of distinct bots that submitted ``round``."""
        check_round(round)
        with self.database.scope(session, round) as s:
            return self._count(s, round)

    def submissions_for(self, round: int, session: Session | None = None) -> list[str]:
        """Bots of ``round`` in arrival order; position i holds rank i."""
        check_round(round)
        stmt = (
            select(SubmissionOrderRow.bot)
            .where(SubmissionOrderRow.round == round)
            .order_by(SubmissionOrderRow.idx.asc())
        )
        with self.database.scope(session, round) as s:
            return list(s.scalars(stmt))

    def submissions(self, round: int, session: Session | None = None) -> SubmissionsResponse:
        """Like ``submissions_for`` but with each bot's receipt time."""
        check_round(round)
        stmt = (
            select(SubmissionOrderRow.bot, SubmissionRow.time)
            .join(
                SubmissionRow,
                (SubmissionRow.round == SubmissionOrderRow.round)
                & (SubmissionRow.bot == SubmissionOrderRow.bot),
            )
            .where(SubmissionOrderRow.round == round)
            .order_by(SubmissionOrderRow.idx.asc())
        )
        with self.database.scope(session, round) as s:
            rows = s.execute(stmt).all()
        return SubmissionsResponse(
            round=round,
            submissions=[QueriedSubmission(bot=bot, time=time) for bot, time in rows],
        )

    @staticmethod
    def _count(session: Session, round: int) -> int:
        stmt = select(func.count()).select_from(SubmissionOrderRow).where(SubmissionOrderRow.round == round)
        return int(session.scalar(stmt) or 0)

    @staticmethod
    def _rank(session: Session, round: int, bot: str) -> int:
        stmt = select(SubmissionOrderRow.idx).where(
            SubmissionOrderRow.round == round,
            SubmissionOrderRow.bot == bot,
        )
        rank = session.scalar(stmt)
        if rank is None:
            raise SubmissionNotFound(round, bot)
        return int(rank)


__all__ = ["SubmissionTracker"]
