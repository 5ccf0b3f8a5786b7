"""Tests for drand round <-> time arithmetic and incentive selection."""

import pytest

from drandledger.drand.rounds import (
    DRAND_GENESIS,
    DRAND_MAINNET,
    NANOS_PER_SECOND,
    U64_MAX,
    RoundClock,
    check_round,
    from_seconds,
    is_incentivised,
    round_after,
    time_of_round,
)
from drandledger.base.config import ChainConfig
from drandledger.errors import RoundUnderflow, TimestampOverflow


class TestTimeOfRound:

    def test_known_rounds(self):
        assert time_of_round(1) == DRAND_GENESIS
        assert time_of_round(1) == from_seconds(1677685200)
        assert time_of_round(2) == from_seconds(1677685203)
        assert time_of_round(111765) == from_seconds(1678020492)

    def test_round_0_underflows(self):
        with pytest.raises(RoundUnderflow):
            time_of_round(0)

    def test_negative_round_underflows(self):
        with pytest.raises(RoundUnderflow):
            time_of_round(-5)

    def test_absurd_round_overflows(self):
        with pytest.raises(TimestampOverflow):
            time_of_round(U64_MAX)

    def test_round_above_u64_overflows(self):
        with pytest.raises(TimestampOverflow):
            check_round(U64_MAX + 1)

    def test_exact_integer_result(self):
        """Large rounds stay exact (no float rounding)."""
        r = 5_000_000_000
        assert time_of_round(r) == DRAND_GENESIS + (r - 1) * 3 * NANOS_PER_SECOND
        assert isinstance(time_of_round(r), int)

    def test_last_representable_round(self):
        last = (U64_MAX - DRAND_GENESIS) // (3 * NANOS_PER_SECOND) + 1
        assert time_of_round(last) <= U64_MAX
        with pytest.raises(TimestampOverflow):
            time_of_round(last + 1)


class TestRoundAfter:

    def test_unix_epoch(self):
        assert round_after(0) == 1

    def test_just_before_genesis(self):
        assert round_after(from_seconds(1677685200) - 1) == 1

    def test_at_genesis(self):
        assert round_after(from_seconds(1677685200)) == 2

    def test_just_after_genesis(self):
        assert round_after(from_seconds(1677685200) + 1) == 2

    def test_seconds_after_genesis(self):
        assert round_after(from_seconds(1677685200 + 2)) == 2
        assert round_after(from_seconds(1677685200 + 3)) == 3
        assert round_after(from_seconds(1677685200 + 4)) == 3

    def test_boundaries_around_each_round(self):
        for r in range(2, 200):
            published = time_of_round(r)
            assert round_after(published - 1) == r
            assert round_after(published) == r + 1

    def test_first_round_boundary(self):
        assert round_after(time_of_round(1) - 1) == 1
        assert round_after(time_of_round(1)) == 2

    def test_defining_inequality(self):
        bases = [
            0,
            DRAND_GENESIS - 1,
            DRAND_GENESIS,
            DRAND_GENESIS + 1,
            DRAND_GENESIS + 2_999_999_999,
            DRAND_GENESIS + 3_000_000_000,
            from_seconds(1678020492) + 17,
        ]
        for base in bases:
            r = round_after(base)
            assert time_of_round(r) > base
            if r > 1:
                assert time_of_round(r - 1) <= base


class TestRoundClock:

    def test_custom_chain(self):
        clock = RoundClock(genesis=from_seconds(1000), round_length=from_seconds(30))
        assert clock.time_of_round(1) == from_seconds(1000)
        assert clock.time_of_round(3) == from_seconds(1060)
        assert clock.round_after(from_seconds(1059)) == 3
        assert clock.round_after(from_seconds(1060)) == 4

    def test_from_config_matches_mainnet(self):
        assert RoundClock.from_config(ChainConfig()) == DRAND_MAINNET

    def test_zero_round_length_rejected(self):
        with pytest.raises(ValueError):
            RoundClock(genesis=0, round_length=0)

    def test_negative_genesis_rejected(self):
        with pytest.raises(TimestampOverflow):
            RoundClock(genesis=-1, round_length=1)


class TestIsIncentivised:

    @pytest.mark.parametrize("round", [0, 1, 2, 5, 9, 11, 19, 21, 29, 31, 101, -10, -20])
    def test_not_incentivised(self, round):
        assert not is_incentivised(round)

    @pytest.mark.parametrize("round", [10, 20, 30, 100, 111760])
    def test_incentivised(self, round):
        assert is_incentivised(round)
