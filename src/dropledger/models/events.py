"""Contract event models: raw logs as delivered and their decoded forms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class EventKind(str, Enum):
    """Event kinds handled by the processor."""

    ACTIVITY_ADD = "activity_add"
    ACTIVITY_FINISH = "activity_finish"
    MINT_NFT = "mint_nft"
    DROP = "drop"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class RawLog:
    """An EVM log exactly as fetched from the node."""

    address: str  # emitting contract
    topics: tuple[str, ...]  # 0x-hex, topic0 first
    data: bytes
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class ContractEvent:
    """One log plus the metadata the upstream fetcher attaches to it."""

    log: RawLog
    contract_address: str
    transaction_hash: str
    event_signature: str  # topic0
    timestamp: int  # block time, seconds since epoch


# ── Decoded events ─────────────────────────────────────────


@dataclass(frozen=True)
class ActivityAddEvent:
    who: str
    activity_id: int
    total_drop_amts: int
    business_name: str
    activity_content: str
    latitude_longitude: str
    activity_deadline: int
    drop_type: int
    drop_number: int
    min_drop_amt: int
    max_drop_amt: int
    token_contract_addr: str


@dataclass(frozen=True)
class ActivityFinishEvent:
    activity_id: int
    token_contract_addr: str
    return_amount: int
    mined_amount: int


@dataclass(frozen=True)
class CreateNftEvent:
    """Emitted by the NFT manager when a merchant pass is minted."""

    creator: str
    token_id: int
    business_name: str
    description: str
    img_url: str
    business_address: str
    website: str
    social: str
    value: int
    deadline: int
    nft_type: int


@dataclass(frozen=True)
class DropEvent:
    who: str  # recipient
    activity_id: int
    drop_amt: int


@dataclass(frozen=True)
class TransferEvent:
    """ERC20 Transfer(from, to, value)."""

    sender: str
    recipient: str
    value: int


DecodedEvent = Union[
    ActivityAddEvent, ActivityFinishEvent, CreateNftEvent, DropEvent, TransferEvent,
]
