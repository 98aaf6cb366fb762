"""LedgerStore protocol - persists records produced from contract events."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from dropledger.models.records import (
    AccountNftInfo,
    AccountNftUpdate,
    ActivityInfo,
    DropInfo,
    TokenNft,
    TokenReceived,
    TokenSent,
)


class LedgerTransaction(Protocol):
    """Operations available inside one transaction scope."""

    # ── Activities ─────────────────────────────────────────

    async def store_activity(self, info: ActivityInfo) -> None:
        ...

    async def get_activity(self, activity_id: int) -> ActivityInfo | None:
        ...

    async def finish_activity(
        self, activity_id: int, return_amount: int, mined_amount: int,
    ) -> None:
        """Record returned/mined totals and mark the activity finished."""
        ...

    async def increment_dropped(self, activity_id: int) -> None:
        ...

    # ── Token ledger ───────────────────────────────────────

    async def store_token_sent(self, record: TokenSent) -> None:
        ...

    async def store_token_received(self, record: TokenReceived) -> None:
        ...

    # ── NFTs ───────────────────────────────────────────────

    async def get_token_nft(self, token_id: int) -> TokenNft | None:
        ...

    async def store_token_nft(self, token: TokenNft) -> None:
        ...

    async def upsert_account_nft(self, update: AccountNftUpdate) -> None:
        """Keep the later of the stored and new expiry for the update's tier."""
        ...

    # ── Drops ──────────────────────────────────────────────

    async def store_drop(self, drop: DropInfo) -> None:
        ...

    async def drop_exists(
        self, transaction_hash: str, event_signature: str, drop_type: int,
    ) -> bool:
        ...


class LedgerStore(LedgerTransaction, Protocol):
    """Persistent ledger state plus the transactional scope primitive."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        ...

    def transaction(self) -> AbstractAsyncContextManager[LedgerTransaction]:
        """Commit on clean exit, roll back and re-raise otherwise."""
        ...

    # ── Queries ────────────────────────────────────────────

    async def get_drops(self, activity_id: int) -> list[DropInfo]:
        ...

    async def get_token_sent(self, address: str) -> list[TokenSent]:
        ...

    async def get_token_received(self, address: str) -> list[TokenReceived]:
        ...

    async def get_account_nft(self, address: str) -> AccountNftInfo | None:
        ...
