"""Per-kind event handlers - decode, map, guard and write one contract event."""

from __future__ import annotations

import logging

from dropledger.errors import ActivityNotFoundError
from dropledger.interfaces.decoder import EventDecoder
from dropledger.interfaces.store import LedgerStore, LedgerTransaction
from dropledger.models.config import DEFAULT_PLATFORM_ADDRESS
from dropledger.models.events import (
    ActivityAddEvent,
    ActivityFinishEvent,
    ContractEvent,
    CreateNftEvent,
    DropEvent,
    EventKind,
    TransferEvent,
)
from dropledger.models.records import (
    ACTIVITY_STATUS_FINISHED,
    DROP_TYPE_RECIPIENT,
    ActivityInfo,
    DropKey,
    ProcessResult,
    ProcessStatus,
)
from dropledger.processing.mapper import (
    map_activity_add,
    map_activity_finish,
    map_drop,
    map_mint_nft,
    map_transfer,
)
from dropledger.processing.writer import IdempotencyGuard, TransactionalWriter

log = logging.getLogger(__name__)

ERC721_TRANSFER_TOPICS = 4


async def _require_activity(tx: LedgerTransaction, activity_id: int) -> ActivityInfo:
    activity = await tx.get_activity(activity_id)
    if activity is None:
        raise ActivityNotFoundError(activity_id)
    return activity


class EventProcessor:
    """Routes contract events to their handler and commits the resulting records.

    Each handler runs Decoding -> Mapping -> (GuardCheck) -> Writing inside
    one transaction. Any failure aborts the transaction and propagates to the
    caller, which owns retry policy.
    """

    def __init__(
        self,
        decoder: EventDecoder,
        store: LedgerStore,
        platform_address: str = DEFAULT_PLATFORM_ADDRESS,
    ) -> None:
        self._decoder = decoder
        self._writer = TransactionalWriter(store)
        self._guard = IdempotencyGuard()
        self._platform_address = platform_address
        self._handlers = {
            EventKind.ACTIVITY_ADD: self.handle_activity_add,
            EventKind.ACTIVITY_FINISH: self.handle_activity_finish,
            EventKind.MINT_NFT: self.handle_mint_nft,
            EventKind.DROP: self.handle_drop,
            EventKind.TRANSFER: self.handle_transfer,
        }

    async def process(self, event: ContractEvent) -> ProcessResult:
        """Handle ``event`` according to its event signature."""
        kind = self._decoder.kind_for(event.event_signature)
        if kind is None:
            log.debug(
                "Ignoring event %s in tx %s", event.event_signature, event.transaction_hash,
            )
            return ProcessResult(kind=None, status=ProcessStatus.IGNORED)
        return await self.handle(kind, event)

    async def handle(self, kind: EventKind, event: ContractEvent) -> ProcessResult:
        return await self._handlers[kind](event)

    # ── Merchant activities ────────────────────────────────

    async def handle_activity_add(self, event: ContractEvent) -> ProcessResult:
        decoded: ActivityAddEvent = self._decoder.decode(EventKind.ACTIVITY_ADD, event.log)
        info, escrow = map_activity_add(decoded, event)

        async def write(tx: LedgerTransaction) -> ProcessStatus:
            if await tx.get_activity(info.activity_id) is not None:
                return ProcessStatus.DUPLICATE
            await tx.store_activity(info)
            await tx.store_token_sent(escrow)
            return ProcessStatus.COMMITTED

        status = await self._writer.run(write)
        if status is ProcessStatus.DUPLICATE:
            log.info("ActivityAdd already recorded: activity=%d", info.activity_id)
            return ProcessResult(EventKind.ACTIVITY_ADD, status)
        log.info(
            "ActivityAdd: activity=%d business=%s escrow=%d",
            info.activity_id, info.business_account, escrow.amount,
        )
        return ProcessResult(EventKind.ACTIVITY_ADD, status, records=2)

    async def handle_activity_finish(self, event: ContractEvent) -> ProcessResult:
        decoded: ActivityFinishEvent = self._decoder.decode(
            EventKind.ACTIVITY_FINISH, event.log,
        )

        async def write(tx: LedgerTransaction) -> ProcessStatus:
            activity = await _require_activity(tx, decoded.activity_id)
            if activity.activity_status == ACTIVITY_STATUS_FINISHED:
                return ProcessStatus.DUPLICATE
            refund = map_activity_finish(decoded, event, activity)
            await tx.finish_activity(
                decoded.activity_id, decoded.return_amount, decoded.mined_amount,
            )
            await tx.store_token_received(refund)
            return ProcessStatus.COMMITTED

        status = await self._writer.run(write)
        if status is ProcessStatus.DUPLICATE:
            log.info("ActivityFinish already recorded: activity=%d", decoded.activity_id)
            return ProcessResult(EventKind.ACTIVITY_FINISH, status)
        log.info(
            "ActivityFinish: activity=%d returned=%d mined=%d",
            decoded.activity_id, decoded.return_amount, decoded.mined_amount,
        )
        return ProcessResult(EventKind.ACTIVITY_FINISH, status, records=2)

    # ── NFT passes ─────────────────────────────────────────

    async def handle_mint_nft(self, event: ContractEvent) -> ProcessResult:
        decoded: CreateNftEvent = self._decoder.decode(EventKind.MINT_NFT, event.log)
        token, update = map_mint_nft(decoded, event)

        async def write(tx: LedgerTransaction) -> ProcessStatus:
            if await tx.get_token_nft(token.token_id) is not None:
                return ProcessStatus.DUPLICATE
            await tx.store_token_nft(token)
            await tx.upsert_account_nft(update)
            return ProcessStatus.COMMITTED

        status = await self._writer.run(write)
        if status is ProcessStatus.DUPLICATE:
            log.info("MintNft already recorded: token=%d", token.token_id)
            return ProcessResult(EventKind.MINT_NFT, status)
        log.info(
            "MintNft: token=%d creator=%s tier=%s deadline=%d",
            token.token_id, token.who, update.tier.name.lower(), update.deadline,
        )
        return ProcessResult(EventKind.MINT_NFT, status, records=2)

    # ── Drops ──────────────────────────────────────────────

    async def handle_drop(self, event: ContractEvent) -> ProcessResult:
        decoded: DropEvent = self._decoder.decode(EventKind.DROP, event.log)
        key = DropKey(event.transaction_hash, event.event_signature, DROP_TYPE_RECIPIENT)

        async def write(tx: LedgerTransaction) -> ProcessStatus:
            if await self._guard.seen(tx, key):
                return ProcessStatus.DUPLICATE
            activity = await _require_activity(tx, decoded.activity_id)
            writes = map_drop(decoded, event, activity)
            await tx.store_drop(writes.recipient_leg)
            await tx.store_token_received(writes.credit)
            await tx.increment_dropped(decoded.activity_id)
            await tx.store_drop(writes.business_leg)
            return ProcessStatus.COMMITTED

        status = await self._writer.run(write)
        if status is ProcessStatus.DUPLICATE:
            return ProcessResult(EventKind.DROP, status)
        log.info(
            "Drop: activity=%d to=%s amount=%d",
            decoded.activity_id, decoded.who, decoded.drop_amt,
        )
        return ProcessResult(EventKind.DROP, status, records=4)

    # ── ERC20 transfers ────────────────────────────────────

    async def handle_transfer(self, event: ContractEvent) -> ProcessResult:
        # ERC721 Transfer shares topic0 but indexes the token id as a fourth topic.
        if len(event.log.topics) == ERC721_TRANSFER_TOPICS:
            log.debug("Ignoring ERC721 Transfer in tx %s", event.transaction_hash)
            return ProcessResult(EventKind.TRANSFER, ProcessStatus.IGNORED)
        decoded: TransferEvent = self._decoder.decode(EventKind.TRANSFER, event.log)
        legs = map_transfer(decoded, event, self._platform_address)
        if legs is None:
            log.debug("Transfer touches platform contract, skipped: tx=%s", event.transaction_hash)
            return ProcessResult(EventKind.TRANSFER, ProcessStatus.FILTERED)
        sent, received = legs

        async def write(tx: LedgerTransaction) -> None:
            await tx.store_token_sent(sent)
            await tx.store_token_received(received)

        await self._writer.run(write)
        log.debug(
            "Transfer: %s -> %s value=%d token=%s",
            sent.address, received.address, sent.amount, sent.token_address,
        )
        return ProcessResult(EventKind.TRANSFER, ProcessStatus.COMMITTED, records=2)
