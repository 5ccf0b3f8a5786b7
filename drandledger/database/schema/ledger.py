"""Ledger tables.

Keys are composite where the logical key is a tuple, so every per-round
query is a range scan over the primary key index. Timestamps are stored
as integer nanoseconds.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class BeaconRow(Base):
    """One canonical verified beacon per round. Append-only."""

    __tablename__ = "beacon"

    round: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
        comment="drand round number (1-based)",
    )
    verified: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Local acceptance time (ns since epoch)",
    )
    randomness: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="sha256(signature), lower case hex",
    )


class SubmissionRow(Base):
    """Receipt time of a bot's first submission of a round."""

    __tablename__ = "submission"

    round: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    bot: Mapped[str] = mapped_column(String, primary_key=True)
    time: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Local receipt time (ns since epoch)",
    )


class SubmissionOrderRow(Base):
    """Arrival rank of a bot within a round. ``idx`` is 0-based and gap-free."""

    __tablename__ = "submission_order"
    __table_args__ = (UniqueConstraint("round", "bot", name="uq_submission_order_round_bot"),)

    round: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    idx: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    bot: Mapped[str] = mapped_column(String, nullable=False)


class BotRow(Base):
    __tablename__ = "bot"

    address: Mapped[str] = mapped_column(String, primary_key=True)
    moniker: Mapped[str] = mapped_column(String, nullable=False, default="")
    rounds_added: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        comment="Number of rounds this bot contributed to (never decremented)",
    )


class AllowlistEntry(Base):
    """Presence-only set of bots allowed to submit."""

    __tablename__ = "allowlist"

    address: Mapped[str] = mapped_column(String, primary_key=True)


__all__ = [
    "AllowlistEntry",
    "BeaconRow",
    "BotRow",
    "SubmissionOrderRow",
    "SubmissionRow",
]
