"""Database access for the ledger.

Every ledger state transition runs inside ``transaction()``: one
SQLAlchemy unit of work that either commits completely or not at all.
Transactions touching the same round are linearised with a per-round
lock so arrival indices are assigned strictly one after the other.
SQLite allows a single writer, so there all transactions share one lock.
Unique-key violations from racing writers in other processes surface as
``SubmissionConflict``.
"""

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager, nullcontext
from typing import Any, ContextManager, Iterator

import bittensor as bt
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from drandledger.errors import SubmissionConflict

from .schema import Base


_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class LedgerDatabase:
    """Engine, session factory and transaction boundaries."""

    def __init__(self, url: str = "sqlite://", echo: bool = False):
        self.url = url
        kwargs: dict[str, Any] = {}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in _MEMORY_URLS:
                # One shared connection, otherwise each session sees an empty database
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, echo=echo, **kwargs)
        self._sessions = sessionmaker(self.engine, expire_on_commit=False)

        self._single_writer = self.engine.dialect.name == "sqlite"
        self._global_lock = threading.RLock()
        self._guard = threading.Lock()
        self._round_locks: weakref.WeakValueDictionary[int, Any] = weakref.WeakValueDictionary()

    def create_all(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(self.engine)
        bt.logging.debug({"ledger_db": {"event": "schema_ready", "dialect": self.engine.dialect.name}})

    def dispose(self) -> None:
        self.engine.dispose()

    def _lock_for(self, round: int | None) -> ContextManager[Any]:
        if self._single_writer:
            return self._global_lock
        if round is None:
            return nullcontext()
        with self._guard:
            lock = self._round_locks.get(round)
            if lock is None:
                lock = threading.Lock()
                self._round_locks[round] = lock
            return lock

    @contextmanager
    def transaction(self, round: int | None = None) -> Iterator[Session]:
        """Open one atomic unit of work, linearised per ``round``.

        Raises:
            SubmissionConflict: a concurrent writer committed a conflicting key.
        """
        with self._lock_for(round):
            try:
                with self._sessions.begin() as session:
                    yield session
            except IntegrityError as exc:
                bt.logging.warning({"ledger_db": {"event": "write_conflict", "round": round, "error": str(exc.orig)}})
                raise SubmissionConflict(f"concurrent write for round {round}, retry") from exc

    @contextmanager
    def scope(self, session: Session | None = None, round: int | None = None) -> Iterator[Session]:
        """Reuse an open session, or run in a fresh transaction."""
        if session is not None:
            yield session
            return
        with self.transaction(round) as new_session:
            yield new_session


__all__ = ["LedgerDatabase"]
