from __future__ import annotations

import hashlib
import os

import pytest

os.environ.setdefault("DRANDLEDGER_TEST_MODE", "true")

from drandledger.base.config import LedgerConfig
from drandledger.database.manager import LedgerDatabase
from drandledger.ledger.service import DrandLedger


@pytest.fixture
def randomness():
    """sha256-shaped digest for a round; ``salt`` yields a conflicting one."""

    def _make(round: int, salt: bytes = b"") -> str:
        return hashlib.sha256(b"drand-round-%d" % round + salt).hexdigest()

    return _make


@pytest.fixture
def database():
    db = LedgerDatabase("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def config():
    return LedgerConfig(manager="manager", min_round=1)


@pytest.fixture
def ledger(config, database):
    ledger = DrandLedger(config, database=database)
    ledger.update_allowlist(add=["bot_a", "bot_b", "bot_c"])
    return ledger
