"""dropledger - commits merchant contract events to a transactional ledger."""

from dropledger.errors import (
    ActivityNotFoundError,
    DecodeError,
    EventProcessingError,
    InvalidRecordError,
    StorageError,
)
from dropledger.evm.decoder import AbiEventDecoder
from dropledger.processing.handlers import EventProcessor
from dropledger.storage.sqlite import SQLiteLedgerStore

__version__ = "0.1.0"

__all__ = [
    "AbiEventDecoder",
    "ActivityNotFoundError",
    "DecodeError",
    "EventProcessingError",
    "EventProcessor",
    "InvalidRecordError",
    "SQLiteLedgerStore",
    "StorageError",
]
