"""Tests for log helpers."""

from drandledger.base.utils import short_address


class TestShortAddress:

    def test_truncates_long_address(self):
        assert short_address("nois1" + "x" * 40) == "nois1xxxxxxxxxxx"

    def test_short_address_kept(self):
        assert short_address("bot_a") == "bot_a"

    def test_missing_address(self):
        assert short_address("") == "none"
        assert short_address(None) == "none"
