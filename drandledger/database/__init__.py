from .manager import LedgerDatabase

__all__ = ["LedgerDatabase"]
