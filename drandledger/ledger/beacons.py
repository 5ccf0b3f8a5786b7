"""Write-once store of verified beacons, one per round."""

from __future__ import annotations

import bittensor as bt
from sqlalchemy import select
from sqlalchemy.orm import Session

from drandledger.database.manager import LedgerDatabase
from drandledger.database.schema import BeaconRow
from drandledger.drand.rounds import RoundClock, check_round
from drandledger.errors import BeaconNotFound, ConflictingRandomness, RoundTooOld

from .models import QueriedBeacon, VerifiedBeacon


DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def _to_queried(row: BeaconRow, clock: RoundClock) -> QueriedBeacon:
    beacon = VerifiedBeacon(verified=row.verified, randomness=row.randomness)
    return QueriedBeacon.make(beacon, row.round, clock)


class BeaconLedger:
    """Canonical verified randomness per round.

    The first accepted beacon of a round is final. Repeating it is a no-op;
    a different digest for the same round is a ``ConflictingRandomness``.
    """

    def __init__(self, database: LedgerDatabase, clock: RoundClock, min_round: int = 1):
        self.database = database
        self.clock = clock
        self.min_round = min_round

    def get(self, round: int, session: Session | None = None) -> QueriedBeacon:
        check_round(round)
        with self.database.scope(session, round) as s:
            row = s.get(BeaconRow, round)
            if row is None:
                raise BeaconNotFound(round)
            return _to_queried(row, self.clock)

    def has(self, round: int, session: Session | None = None) -> bool:
        with self.database.scope(session, round) as s:
            return s.get(BeaconRow, round) is not None

    def put(
        self,
        round: int,
        randomness: str,
        verified_at: int,
        session: Session | None = None,
    ) -> QueriedBeacon:
        """Store the beacon of ``round`` unless one exists already.

        Returns the canonical record, which is the existing one for a
        repeated submission.

        Raises:
            RoundUnderflow: round 0.
            RoundTooOld: round below ``min_round``. Checked before storage access.
            ConflictingRandomness: round already verified with another digest.
        """
        beacon, _ = self.store(round, randomness, verified_at, session=session)
        return beacon

    def store(
        self,
        round: int,
        randomness: str,
        verified_at: int,
        session: Session | None = None,
    ) -> tuple[QueriedBeacon, bool]:
        """Like ``put`` but also reports whether this call created the record."""
        check_round(round)
        # Fails with TimestampOverflow before anything is written
        self.clock.time_of_round(round)
        if round < self.min_round:
            bt.logging.warning({"beacon_ledger": {"event": "round_too_old", "round": round, "min_round": self.min_round}})
            raise RoundTooOld(round, self.min_round)
        candidate = VerifiedBeacon(verified=verified_at, randomness=randomness)

        with self.database.scope(session, round) as s:
            row = s.get(BeaconRow, round)
            if row is not None:
                if row.randomness != candidate.randomness:
                    bt.logging.warning({"beacon_ledger": {
                        "event": "conflicting_randomness",
                        "round": round,
                        "stored": row.randomness[:16],
                        "submitted": candidate.randomness[:16],
                    }})
                    raise ConflictingRandomness(round, row.randomness, candidate.randomness)
                return _to_queried(row, self.clock), False

            row = BeaconRow(round=round, verified=candidate.verified, randomness=candidate.randomness)
            s.add(row)
            s.flush()
            bt.logging.info({"beacon_ledger": {"event": "verified", "round": round}})
            return _to_queried(row, self.clock), True

    def list(
        self,
        ascending: bool = True,
        start_after: int | None = None,
        limit: int | None = None,
        session: Session | None = None,
    ) -> list[QueriedBeacon]:
        """Page through verified beacons ordered by round."""
        limit = min(limit or DEFAULT_LIMIT, MAX_LIMIT)
        stmt = select(BeaconRow)
        if ascending:
            if start_after is not None:
                stmt = stmt.where(BeaconRow.round > start_after)
            stmt = stmt.order_by(BeaconRow.round.asc())
        else:
            if start_after is not None:
                stmt = stmt.where(BeaconRow.round < start_after)
            stmt = stmt.order_by(BeaconRow.round.desc())
        stmt = stmt.limit(limit)

        with self.database.scope(session) as s:
            return [_to_queried(row, self.clock) for row in s.scalars(stmt)]


__all__ = ["DEFAULT_LIMIT", "MAX_LIMIT", "BeaconLedger"]
