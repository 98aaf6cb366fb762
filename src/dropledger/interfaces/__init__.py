"""Protocol interfaces for dropledger collaborators."""

from dropledger.interfaces.decoder import EventDecoder
from dropledger.interfaces.store import LedgerStore, LedgerTransaction

__all__ = ["EventDecoder", "LedgerStore", "LedgerTransaction"]
