"""Data models for the dropledger event sync."""

from dropledger.models.events import (
    ActivityAddEvent,
    ActivityFinishEvent,
    ContractEvent,
    CreateNftEvent,
    DecodedEvent,
    DropEvent,
    EventKind,
    RawLog,
    TransferEvent,
)
from dropledger.models.records import (
    AccountNftInfo,
    AccountNftUpdate,
    ActivityInfo,
    DropInfo,
    DropKey,
    DropWriteSet,
    NftTier,
    ProcessResult,
    ProcessStatus,
    TokenNft,
    TokenReceived,
    TokenSent,
)
from dropledger.models.config import SyncConfig

__all__ = [
    "ActivityAddEvent", "ActivityFinishEvent", "ContractEvent", "CreateNftEvent",
    "DecodedEvent", "DropEvent", "EventKind", "RawLog", "TransferEvent",
    "AccountNftInfo", "AccountNftUpdate", "ActivityInfo", "DropInfo", "DropKey",
    "DropWriteSet", "NftTier", "ProcessResult", "ProcessStatus",
    "TokenNft", "TokenReceived", "TokenSent",
    "SyncConfig",
]
