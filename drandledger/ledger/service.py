"""Transactional entry point of the verification ledger.

A submission of round R by bot B is one atomic state transition:

1. allowlist gate (before the transaction; a rejection touches nothing)
2. BeaconLedger: first valid beacon of R becomes canonical, repeats are no-ops
3. SubmissionTracker: B gets the next arrival rank for R, or keeps its old one
4. BotRegistry: B's ``rounds_added`` grows by one if the arrival was new

Steps 2-4 commit together or not at all.
"""

from __future__ import annotations

import time
from typing import Iterable

import bittensor as bt

from drandledger.base.config import LedgerConfig
from drandledger.base.utils import short_address
from drandledger.database.manager import LedgerDatabase
from drandledger.drand.rounds import RoundClock, check_round, is_incentivised

from .auth import Allowlist
from .beacons import BeaconLedger
from .bots import BotRegistry
from .models import (
    AddRoundResponse,
    QueriedBeacon,
    QueriedBot,
    SubmissionsResponse,
)
from .submissions import SubmissionTracker


class DrandLedger:
    """Verification ledger facade wiring the components to one database."""

    def __init__(self, config: LedgerConfig, database: LedgerDatabase | None = None):
        self.config = config
        self.clock = RoundClock.from_config(config.chain)
        self.database = database if database is not None else LedgerDatabase(config.database_url)
        self.database.create_all()

        self.beacon_ledger = BeaconLedger(self.database, self.clock, min_round=config.min_round)
        self.tracker = SubmissionTracker(self.database)
        self.registry = BotRegistry(self.database)
        self.allowlist = Allowlist(self.database)

    # -- Execute --

    def add_round(
        self,
        round: int,
        randomness: str,
        bot: str,
        now: int | None = None,
        moniker: str = "",
    ) -> AddRoundResponse:
        """Accept a verified ``randomness`` for ``round`` submitted by ``bot``.

        ``randomness`` must already be verified against the chain's public
        key; the ledger only enforces ordering and immutability.

        Args:
            now: Receipt time in ns since epoch (default: wall clock).
            moniker: Display name used if ``bot`` is not registered yet.

        Raises:
            NotAllowlisted: bot may not submit. No state is touched.
            RoundUnderflow, RoundTooOld: invalid round.
            ConflictingRandomness: round is verified with another digest;
                the whole transaction is rolled back.
            SubmissionConflict: lost a race against another writer; retry.
        """
        check_round(round)
        self.allowlist.check(bot)
        if now is None:
            now = time.time_ns()

        with self.database.transaction(round) as session:
            beacon, created = self.beacon_ledger.store(round, randomness, now, session=session)
            receipt = self.tracker.record_submission(round, bot, now, session=session)
            if receipt.is_new:
                self.registry.note_contribution(bot, moniker, session=session)

        response = AddRoundResponse(
            beacon=beacon,
            bot=bot,
            rank=receipt.rank,
            is_new=receipt.is_new,
            created_beacon=created,
            is_incentivised=is_incentivised(round),
        )
        bt.logging.info({"drand_ledger": {
            "event": "add_round",
            "round": round,
            "bot": short_address(bot),
            "rank": response.rank,
            "is_new": response.is_new,
            "created_beacon": created,
            "incentivised": response.is_incentivised,
        }})
        return response

    def register_bot(self, bot: str, moniker: str) -> QueriedBot:
        return self.registry.register(bot, moniker)

    def update_allowlist(self, add: Iterable[str] = (), remove: Iterable[str] = ()) -> list[str]:
        return self.allowlist.update(add=add, remove=remove)

    # -- Query --

    def beacon(self, round: int) -> QueriedBeacon:
        return self.beacon_ledger.get(round)

    def beacons(
        self,
        ascending: bool = True,
        start_after: int | None = None,
        limit: int | None = None,
    ) -> list[QueriedBeacon]:
        return self.beacon_ledger.list(ascending=ascending, start_after=start_after, limit=limit)

    def submissions(self, round: int) -> SubmissionsResponse:
        return self.tracker.submissions(round)

    def submissions_for(self, round: int) -> list[str]:
        return self.tracker.submissions_for(round)

    def bot(self, address: str) -> QueriedBot:
        return self.registry.get(address)

    def bots(self) -> list[QueriedBot]:
        return self.registry.list()

    def allowed_bots(self) -> list[str]:
        return self.allowlist.list()

    def incentive_candidates(self, round: int) -> list[str]:
        """Bots of an incentivised, verified round in arrival order.

        Empty for rounds that are not incentivised or not verified yet.
        Turning ranks into amounts is the payout logic's job.
        """
        check_round(round)
        if not is_incentivised(round):
            return []
        with self.database.transaction(round) as session:
            if not self.beacon_ledger.has(round, session=session):
                return []
            return self.tracker.submissions_for(round, session=session)


__all__ = ["DrandLedger"]
