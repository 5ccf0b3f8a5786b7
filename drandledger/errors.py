"""Error kinds raised by the verification ledger.

Every ledger error is local to a single operation. ``TimestampOverflow``
is deliberately outside the ``LedgerError`` tree: it signals a caller bug
(an absurd round or timestamp), not a recoverable condition.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for recoverable ledger errors."""


class RoundUnderflow(LedgerError, ValueError):
    """Round 0 (or a negative round) was passed. drand has no round 0."""

    def __init__(self, round: int):
        super().__init__(f"round must be >= 1, got {round}")
        self.round = round


class NotFound(LedgerError, LookupError):
    """A lookup found no record."""


class BeaconNotFound(NotFound):
    def __init__(self, round: int):
        super().__init__(f"no verified beacon for round {round}")
        self.round = round


class BotNotFound(NotFound):
    def __init__(self, address: str):
        super().__init__(f"unknown bot {address}")
        self.address = address


class SubmissionNotFound(NotFound):
    def __init__(self, round: int, address: str):
        super().__init__(f"bot {address} did not submit round {round}")
        self.round = round
        self.address = address


class RoundTooOld(LedgerError):
    """Round is below the configured ``min_round``."""

    def __init__(self, round: int, min_round: int):
        super().__init__(f"round {round} is below min_round {min_round}")
        self.round = round
        self.min_round = min_round


class ConflictingRandomness(LedgerError):
    """A round is already verified with a different randomness digest."""

    def __init__(self, round: int, stored: str, submitted: str):
        super().__init__(
            f"round {round} already verified with randomness {stored}, "
            f"got {submitted}"
        )
        self.round = round
        self.stored = stored
        self.submitted = submitted


class NotAllowlisted(LedgerError, PermissionError):
    def __init__(self, address: str):
        super().__init__(f"bot {address} is not allowlisted")
        self.address = address


class SubmissionConflict(LedgerError):
    """A concurrent transaction won a write race. Safe to retry."""


class TimestampOverflow(OverflowError):
    """Timestamp arithmetic left the unsigned 64-bit range."""


__all__ = [
    "BeaconNotFound",
    "BotNotFound",
    "ConflictingRandomness",
    "LedgerError",
    "NotAllowlisted",
    "NotFound",
    "RoundTooOld",
    "RoundUnderflow",
    "SubmissionConflict",
    "SubmissionNotFound",
    "TimestampOverflow",
]
