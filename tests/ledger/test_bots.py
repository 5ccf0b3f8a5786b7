"""Tests for the bot registry and rounds_added bookkeeping."""

import pytest

from drandledger.database.manager import LedgerDatabase
from drandledger.database.schema import BotRow
from drandledger.errors import BotNotFound
from drandledger.ledger.bots import BotRegistry
from drandledger.ledger.submissions import SubmissionTracker


@pytest.fixture
def registry(database):
    return BotRegistry(database)


class TestNoteContribution:

    def test_unknown_bot_created_with_moniker(self, registry):
        bot = registry.note_contribution("bot_x", "Xavier")
        assert bot.address == "bot_x"
        assert bot.moniker == "Xavier"
        assert bot.rounds_added == 1

    def test_counter_increments(self, registry):
        for _ in range(3):
            registry.note_contribution("bot_x", "Xavier")
        assert registry.get("bot_x").rounds_added == 3

    def test_moniker_only_used_for_new_bot(self, registry):
        registry.note_contribution("bot_x", "Xavier")
        bot = registry.note_contribution("bot_x", "Other")
        assert bot.moniker == "Xavier"

    def test_increment_applies_to_stored_counter(self, tmp_path):
        """A writer on another round bumping the same bot is never overwritten."""
        database = LedgerDatabase(f"sqlite:///{tmp_path / 'bots.db'}")
        database.create_all()
        database._single_writer = False
        registry = BotRegistry(database)
        registry.note_contribution("bot_x", "Xavier")
        try:
            with database.transaction(10) as s:
                assert s.get(BotRow, "bot_x").rounds_added == 1
                # Contribution for round 20 commits while round 10 holds a stale row
                with database.transaction(20) as other:
                    registry.note_contribution("bot_x", session=other)
                bot = registry.note_contribution("bot_x", session=s)
            assert bot.rounds_added == 3
            assert registry.get("bot_x").rounds_added == 3
        finally:
            database.dispose()


class TestRegister:

    def test_register_new(self, registry):
        bot = registry.register("bot_y", "Yvonne")
        assert bot.rounds_added == 0

    def test_rename_keeps_counter(self, registry):
        registry.note_contribution("bot_y", "Yvonne")
        registry.note_contribution("bot_y", "Yvonne")
        bot = registry.register("bot_y", "Yve")
        assert bot.moniker == "Yve"
        assert bot.rounds_added == 2


class TestQueries:

    def test_get_unknown(self, registry):
        with pytest.raises(BotNotFound):
            registry.get("ghost")

    def test_list_sorted_by_address(self, registry):
        registry.register("b", "Bee")
        registry.register("a", "Ay")
        assert [b.address for b in registry.list()] == ["a", "b"]


class TestRebuild:

    def test_rebuild_from_submission_order(self, registry, database):
        tracker = SubmissionTracker(database)
        for round in (10, 20, 30):
            tracker.record_submission(round, "bot_x", now=1)
        tracker.record_submission(20, "bot_y", now=2)
        registry.register("bot_x", "Xavier")

        changed = registry.rebuild_rounds_added()

        assert changed == {"bot_x": 3, "bot_y": 1}
        assert registry.get("bot_x").rounds_added == 3
        assert registry.get("bot_x").moniker == "Xavier"
        assert registry.get("bot_y").rounds_added == 1

    def test_rebuild_is_noop_when_consistent(self, registry, database):
        tracker = SubmissionTracker(database)
        tracker.record_submission(10, "bot_x", now=1)
        registry.note_contribution("bot_x", "Xavier")
        assert registry.rebuild_rounds_added() == {}

    def test_rebuild_corrects_drift(self, registry, database):
        registry.register("bot_z", "Zed")
        with database.transaction() as s:
            s.get(BotRow, "bot_z").rounds_added = 7
        assert registry.rebuild_rounds_added() == {"bot_z": -7}
        assert registry.get("bot_z").rounds_added == 0
