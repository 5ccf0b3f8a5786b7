"""Verification ledger for drand beacon rounds relayed by independent bots."""

__version__ = "0.3.0"
