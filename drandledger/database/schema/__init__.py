from .base import Base
from .ledger import AllowlistEntry, BeaconRow, BotRow, SubmissionOrderRow, SubmissionRow

__all__ = [
    "AllowlistEntry",
    "Base",
    "BeaconRow",
    "BotRow",
    "SubmissionOrderRow",
    "SubmissionRow",
]
