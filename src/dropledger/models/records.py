"""Application records produced from contract events and persisted by the store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from dropledger.errors import InvalidRecordError
from dropledger.models.events import EventKind

ACTIVITY_STATUS_OPEN = 1
ACTIVITY_STATUS_FINISHED = 2

DROP_TYPE_RECIPIENT = 1
DROP_TYPE_BUSINESS = 2

TRANSFER_DESCRIPTION = "ERC20 Token Transfer"


@dataclass
class ActivityInfo:
    """A merchant drop campaign."""

    activity_id: int
    business_name: str
    business_account: str
    activity_content: str
    latitude_longitude: str
    activity_create_time: int
    activity_deadline: int
    drop_type: int
    drop_number: int
    min_drop_amt: int
    max_drop_amt: int
    token_contract_addr: str
    activity_status: int = ACTIVITY_STATUS_OPEN
    already_drop_number: int = 0
    return_amount: int = 0
    mined_amount: int = 0


@dataclass(frozen=True)
class TokenSent:
    """Outgoing leg of a token movement."""

    address: str
    token_address: str
    amount: int
    description: str
    timestamp: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidRecordError(f"amount must be non-negative, got {self.amount}")


@dataclass(frozen=True)
class TokenReceived:
    """Incoming leg of a token movement."""

    address: str
    token_address: str
    amount: int
    description: str
    timestamp: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidRecordError(f"amount must be non-negative, got {self.amount}")


@dataclass(frozen=True)
class TokenNft:
    token_id: int
    who: str
    business_name: str
    description: str
    img_url: str
    business_address: str
    website: str
    social: str
    contract_address: str
    cost_value: int
    deadline: int
    nft_type: int


class NftTier(IntEnum):
    """Merchant pass tier; each tier owns exactly one expiry column."""

    PRO = 1
    BASIC = 2

    @classmethod
    def from_type(cls, nft_type: int) -> NftTier:
        # Only type 1 is a pro pass; every other discriminator is basic.
        return cls.PRO if nft_type == cls.PRO else cls.BASIC

    @property
    def expiry_field(self) -> str:
        return _EXPIRY_FIELDS[self]


_EXPIRY_FIELDS = {
    NftTier.PRO: "pro_deadline",
    NftTier.BASIC: "basic_deadline",
}


@dataclass(frozen=True)
class AccountNftUpdate:
    """Upsert of one account's expiry for a single tier."""

    address: str
    tier: NftTier
    deadline: int


@dataclass
class AccountNftInfo:
    """Per-creator pass summary as persisted."""

    address: str
    basic_deadline: int = 0
    pro_deadline: int = 0


@dataclass(frozen=True)
class DropInfo:
    address: str
    drop_amount: int
    activity_id: int
    drop_type: int  # DROP_TYPE_RECIPIENT or DROP_TYPE_BUSINESS
    timestamp: int
    transaction_hash: str
    event_signature: str

    @property
    def key(self) -> DropKey:
        return DropKey(self.transaction_hash, self.event_signature, self.drop_type)


@dataclass(frozen=True)
class DropKey:
    """Idempotency key for drop rows."""

    transaction_hash: str
    event_signature: str
    drop_type: int


# ── Write sets ─────────────────────────────────────────────


@dataclass(frozen=True)
class DropWriteSet:
    """All rows one Drop event commits together."""

    recipient_leg: DropInfo
    business_leg: DropInfo
    credit: TokenReceived


# ── Processing outcome ─────────────────────────────────────


class ProcessStatus(str, Enum):
    COMMITTED = "committed"
    DUPLICATE = "duplicate"  # redelivery of an already committed event
    FILTERED = "filtered"  # decoded, but produces no records
    IGNORED = "ignored"  # event signature not handled


@dataclass
class ProcessResult:
    """Outcome of handling one contract event."""

    kind: EventKind | None
    status: ProcessStatus
    records: int = 0
