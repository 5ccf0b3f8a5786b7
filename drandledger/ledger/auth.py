"""Bot allowlist: the gate consulted before a submission is accepted.

Fail-closed: an empty or unknown address is rejected. A rejection never
touches ledger state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import bittensor as bt
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from drandledger.base.utils import short_address
from drandledger.database.manager import LedgerDatabase
from drandledger.database.schema import AllowlistEntry
from drandledger.errors import NotAllowlisted


@dataclass
class EligibilityResult:
    """Result of an eligibility check."""

    eligible: bool
    reason: str = ""


class Allowlist:
    """Presence-only set of bot addresses allowed to submit rounds."""

    def __init__(self, database: LedgerDatabase):
        self.database = database

    def check_eligibility(self, bot: str, session: Session | None = None) -> EligibilityResult:
        def _reject(reason: str) -> EligibilityResult:
            bt.logging.warning({"allowlist": {"event": "eligibility_rejected", "bot": short_address(bot), "reason": reason}})
            return EligibilityResult(eligible=False, reason=reason)

        if not bot:
            return _reject("empty_address")
        if not self.is_allowed(bot, session=session):
            return _reject("not_allowlisted")
        return EligibilityResult(eligible=True)

    def is_allowed(self, bot: str, session: Session | None = None) -> bool:
        with self.database.scope(session) as s:
            return s.get(AllowlistEntry, bot) is not None

    def check(self, bot: str, session: Session | None = None) -> None:
        """Raise ``NotAllowlisted`` unless ``bot`` may submit."""
        if not self.check_eligibility(bot, session=session).eligible:
            raise NotAllowlisted(bot)

    def update(
        self,
        add: Iterable[str] = (),
        remove: Iterable[str] = (),
        session: Session | None = None,
    ) -> list[str]:
        """Add and remove addresses in one transaction. Removal wins on overlap.

        Returns the resulting allowlist.
        """
        add = list(dict.fromkeys(a for a in add if a))
        remove = list(remove)
        with self.database.scope(session) as s:
            for address in add:
                if s.get(AllowlistEntry, address) is None:
                    s.add(AllowlistEntry(address=address))
            s.flush()
            if remove:
                s.execute(delete(AllowlistEntry).where(AllowlistEntry.address.in_(remove)))
            bt.logging.info({"allowlist": {"event": "updated", "added": len(add), "removed": len(remove)}})
            return self.list(session=s)

    def list(self, session: Session | None = None) -> list[str]:
        with self.database.scope(session) as s:
            return list(s.scalars(select(AllowlistEntry.address).order_by(AllowlistEntry.address)))


__all__ = ["Allowlist", "EligibilityResult"]
