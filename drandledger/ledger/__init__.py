"""drand verification ledger.

Stores one canonical verified beacon per round, the arrival order of
every bot that submitted it, and per-bot contribution counters.
"""

from .auth import Allowlist, EligibilityResult
from .beacons import BeaconLedger
from .bots import BotRegistry
from .models import (
    AddRoundResponse,
    Bot,
    QueriedBeacon,
    QueriedBot,
    QueriedSubmission,
    StoredSubmission,
    SubmissionReceipt,
    SubmissionsResponse,
    VerifiedBeacon,
)
from .service import DrandLedger
from .submissions import SubmissionTracker

__all__ = [
    "AddRoundResponse",
    "Allowlist",
    "BeaconLedger",
    "Bot",
    "BotRegistry",
    "DrandLedger",
    "EligibilityResult",
    "QueriedBeacon",
    "QueriedBot",
    "QueriedSubmission",
    "StoredSubmission",
    "SubmissionReceipt",
    "SubmissionTracker",
    "SubmissionsResponse",
    "VerifiedBeacon",
]
