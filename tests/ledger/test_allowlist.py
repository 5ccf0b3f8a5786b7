"""Tests for the bot allowlist gate."""

import pytest

from drandledger.errors import NotAllowlisted
from drandledger.ledger.auth import Allowlist


@pytest.fixture
def allowlist(database):
    allowlist = Allowlist(database)
    allowlist.update(add=["bot_a", "bot_b"])
    return allowlist


class TestAllowlist:

    def test_allowed_bot_passes(self, allowlist):
        assert allowlist.is_allowed("bot_a")
        assert allowlist.check_eligibility("bot_a").eligible
        allowlist.check("bot_a")

    def test_unknown_bot_rejected(self, allowlist):
        result = allowlist.check_eligibility("bot_z")
        assert not result.eligible
        assert result.reason == "not_allowlisted"
        with pytest.raises(NotAllowlisted):
            allowlist.check("bot_z")

    def test_empty_address_rejected(self, allowlist):
        result = allowlist.check_eligibility("")
        assert not result.eligible
        assert result.reason == "empty_address"

    def test_update_add_remove(self, allowlist):
        assert allowlist.update(add=["bot_c"], remove=["bot_a"]) == ["bot_b", "bot_c"]
        assert not allowlist.is_allowed("bot_a")

    def test_duplicates_ignored(self, allowlist):
        assert allowlist.update(add=["bot_c", "bot_c", "bot_a"]) == ["bot_a", "bot_b", "bot_c"]

    def test_remove_wins_on_overlap(self, allowlist):
        assert allowlist.update(add=["bot_d"], remove=["bot_d"]) == ["bot_a", "bot_b"]

    def test_list_sorted(self, allowlist):
        allowlist.update(add=["aaa"])
        assert allowlist.list() == ["aaa", "bot_a", "bot_b"]
