"""Pure round arithmetic for a drand chain.

Timestamps are integer nanoseconds since the UNIX epoch. All arithmetic
is exact; nothing here touches floating point or wall-clock time.

Mirrors drand's ``TimeOfRound`` / ``NextRound`` (chain/time.go), except
that rounds are 1-based: round 1 is published exactly at genesis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from drandledger.errors import RoundUnderflow, TimestampOverflow

if TYPE_CHECKING:
    from drandledger.base.config import ChainConfig


NANOS_PER_SECOND = 1_000_000_000
U64_MAX = 2**64 - 1

# Every 10th round is paid out to bots.
INCENTIVE_ROUND_INTERVAL = 10


def from_seconds(seconds: int) -> int:
    """Convert whole seconds to a nanosecond timestamp."""
    return _checked(seconds * NANOS_PER_SECOND)


def _checked(value: int) -> int:
    if value < 0 or value > U64_MAX:
        raise TimestampOverflow(f"timestamp out of u64 range: {value}")
    return value


def check_round(round: int) -> int:
    """Reject round 0 and anything outside the u64 range."""
    if round < 1:
        raise RoundUnderflow(round)
    if round > U64_MAX:
        raise TimestampOverflow(f"round out of u64 range: {round}")
    return round


@dataclass(frozen=True)
class RoundClock:
    """Conversion between round numbers and publication times.

    Attributes:
        genesis: Publication time of round 1 (ns).
        round_length: Period between two rounds (ns).
    """

    genesis: int
    round_length: int

    def __post_init__(self) -> None:
        _checked(self.genesis)
        if self.round_length <= 0:
            raise ValueError(f"round_length must be positive, got {self.round_length}")

    @classmethod
    def from_config(cls, chain: ChainConfig) -> RoundClock:
        return cls(
            genesis=from_seconds(chain.genesis_seconds),
            round_length=from_seconds(chain.round_length_seconds),
        )

    def time_of_round(self, round: int) -> int:
        """Publication time of ``round``.

        Raises:
            RoundUnderflow: for round 0.
            TimestampOverflow: if the result leaves the u64 range.
        """
        check_round(round)
        return _checked(self.genesis + (round - 1) * self.round_length)

    def round_after(self, base: int) -> int:
        """Smallest round published strictly after ``base``.

        Any pre-genesis instant maps to round 1, even though round 1 is
        published exactly at genesis rather than after it.
        """
        if base < self.genesis:
            return 1
        periods_since_genesis = (base - self.genesis) // self.round_length
        next_period_index = periods_since_genesis + 1
        return check_round(next_period_index + 1)  # 0-based -> 1-based


DRAND_GENESIS = from_seconds(1677685200)
DRAND_ROUND_LENGTH = from_seconds(3)
DRAND_MAINNET = RoundClock(genesis=DRAND_GENESIS, round_length=DRAND_ROUND_LENGTH)


def time_of_round(round: int) -> int:
    return DRAND_MAINNET.time_of_round(round)


def round_after(base: int) -> int:
    return DRAND_MAINNET.round_after(base)


def is_incentivised(round: int) -> bool:
    """True iff the round takes part in incentive accounting.

    Round 0 never exists in drand and negative rounds are invalid, so
    neither is ever incentivised.
    """
    return round > 0 and round % INCENTIVE_ROUND_INTERVAL == 0


__all__ = [
    "DRAND_GENESIS",
    "DRAND_MAINNET",
    "DRAND_ROUND_LENGTH",
    "INCENTIVE_ROUND_INTERVAL",
    "NANOS_PER_SECOND",
    "U64_MAX",
    "RoundClock",
    "check_round",
    "from_seconds",
    "is_incentivised",
    "round_after",
    "time_of_round",
]
