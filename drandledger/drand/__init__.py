"""drand chain arithmetic: round <-> time conversion and incentive selection."""

from .rounds import (
    DRAND_GENESIS,
    DRAND_MAINNET,
    DRAND_ROUND_LENGTH,
    NANOS_PER_SECOND,
    RoundClock,
    check_round,
    from_seconds,
    is_incentivised,
    round_after,
    time_of_round,
)

__all__ = [
    "DRAND_GENESIS",
    "DRAND_MAINNET",
    "DRAND_ROUND_LENGTH",
    "NANOS_PER_SECOND",
    "RoundClock",
    "check_round",
    "from_seconds",
    "is_incentivised",
    "round_after",
    "time_of_round",
]
