"""Tests for ledger Pydantic models."""

import pytest
from pydantic import ValidationError

from drandledger.drand.rounds import DRAND_MAINNET, from_seconds
from drandledger.ledger.models import (
    Bot,
    QueriedBeacon,
    QueriedBot,
    SubmissionReceipt,
    VerifiedBeacon,
)


DIGEST = "2f" * 32


class TestVerifiedBeacon:

    def test_accepts_sha256_hex(self):
        beacon = VerifiedBeacon(verified=1, randomness=DIGEST)
        assert beacon.randomness == DIGEST

    def test_lowercases(self):
        assert VerifiedBeacon(verified=1, randomness=DIGEST.upper()).randomness == DIGEST

    @pytest.mark.parametrize("value", ["", "zz" * 32, "2f" * 31, "2f" * 33])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            VerifiedBeacon(verified=1, randomness=value)


class TestQueriedBeacon:

    def test_make_adds_round_and_published(self):
        beacon = VerifiedBeacon(verified=from_seconds(1678020500), randomness=DIGEST)
        queried = QueriedBeacon.make(beacon, 111765, DRAND_MAINNET)
        assert queried.round == 111765
        assert queried.published == from_seconds(1678020492)
        assert queried.verified == from_seconds(1678020500)
        assert queried.randomness == DIGEST

    def test_json_roundtrip(self):
        queried = QueriedBeacon.make(VerifiedBeacon(verified=5, randomness=DIGEST), 2, DRAND_MAINNET)
        assert QueriedBeacon(**queried.model_dump(mode="json")) == queried


class TestBots:

    def test_queried_bot_make(self):
        queried = QueriedBot.make(Bot(moniker="Alice", rounds_added=4), "bot_a")
        assert queried.address == "bot_a"
        assert queried.moniker == "Alice"
        assert queried.rounds_added == 4

    def test_rounds_added_non_negative(self):
        with pytest.raises(ValidationError):
            Bot(moniker="x", rounds_added=-1)


class TestSubmissionReceipt:

    def test_rank_non_negative(self):
        with pytest.raises(ValidationError):
            SubmissionReceipt(rank=-1, is_new=True)
