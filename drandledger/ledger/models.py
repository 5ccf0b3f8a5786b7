"""Pydantic models for the verification ledger.

Stored records (VerifiedBeacon, StoredSubmission, Bot) carry no key
fields; the key lives in the table. Queried* models are read-side
composites and are never persisted.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from drandledger.drand.rounds import RoundClock


RANDOMNESS_HEX_LENGTH = 64


# ---------------------------------------------------------------------------
# Beacons
# ---------------------------------------------------------------------------


class VerifiedBeacon(BaseModel):
    """Canonical verified randomness of one round."""

    verified: int = Field(ge=0, description="Ledger acceptance time (ns since epoch)")
    randomness: str = Field(
        min_length=RANDOMNESS_HEX_LENGTH,
        max_length=RANDOMNESS_HEX_LENGTH,
        pattern=r"^[0-9a-f]+$",
        description="sha256(signature) in lower case hex",
    )

    @field_validator("randomness", mode="before")
    @classmethod
    def _lower_hex(cls, value: object) -> object:
        if isinstance(value, str):
            return value.lower()
        return value


class QueriedBeacon(BaseModel):
    """Like VerifiedBeacon but plus round and its publication time."""

    round: int = Field(ge=1)
    published: int = Field(description="Publication time derived from the round (ns)")
    verified: int
    randomness: str

    @classmethod
    def make(cls, beacon: VerifiedBeacon, round: int, clock: RoundClock) -> QueriedBeacon:
        return cls(
            round=round,
            published=clock.time_of_round(round),
            verified=beacon.verified,
            randomness=beacon.randomness,
        )


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class StoredSubmission(BaseModel):
    time: int = Field(ge=0, description="Local receipt time (ns since epoch)")


class SubmissionReceipt(BaseModel):
    """Outcome of recording one (round, bot) submission."""

    rank: int = Field(ge=0, description="0-based arrival rank within the round")
    is_new: bool


class QueriedSubmission(BaseModel):
    bot: str
    time: int


class SubmissionsResponse(BaseModel):
    """All submissions of a round. The n-th submission has index n-1."""

    round: int
    submissions: list[QueriedSubmission] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Bots
# ---------------------------------------------------------------------------


class Bot(BaseModel):
    moniker: str = ""
    rounds_added: int = Field(default=0, ge=0, description="Number of rounds added")


class QueriedBot(BaseModel):
    """Like Bot but with address."""

    moniker: str
    address: str
    rounds_added: int

    @classmethod
    def make(cls, bot: Bot, address: str) -> QueriedBot:
        return cls(address=address, moniker=bot.moniker, rounds_added=bot.rounds_added)


# ---------------------------------------------------------------------------
# Add round
# ---------------------------------------------------------------------------


class AddRoundResponse(BaseModel):
    """Result of one bot submission of a verified round."""

    beacon: QueriedBeacon
    bot: str
    rank: int
    is_new: bool = Field(description="False for a resubmission of the same round by the same bot")
    created_beacon: bool = Field(description="True if this submission made the round canonical")
    is_incentivised: bool


__all__ = [
    "RANDOMNESS_HEX_LENGTH",
    "AddRoundResponse",
    "Bot",
    "QueriedBeacon",
    "QueriedBot",
    "QueriedSubmission",
    "StoredSubmission",
    "SubmissionReceipt",
    "SubmissionsResponse",
    "VerifiedBeacon",
]
