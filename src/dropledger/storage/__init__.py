"""Storage backends."""

from dropledger.storage.sqlite import SQLiteLedgerStore

__all__ = ["SQLiteLedgerStore"]
