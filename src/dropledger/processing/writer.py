"""Transactional write scope and redelivery guard."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from dropledger.interfaces.store import LedgerStore, LedgerTransaction
from dropledger.models.records import DropKey

log = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionalWriter:
    """Runs all writes for one event inside a single store transaction.

    The first failing operation aborts the scope; nothing it wrote survives.
    """

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    async def run(self, fn: Callable[[LedgerTransaction], Awaitable[T]]) -> T:
        try:
            async with self._store.transaction() as tx:
                return await fn(tx)
        except Exception as exc:
            log.debug("Transaction aborted: %s", exc)
            raise


class IdempotencyGuard:
    """Detects drops already committed by an earlier delivery of the same event."""

    async def seen(self, tx: LedgerTransaction, key: DropKey) -> bool:
        exists = await tx.drop_exists(
            key.transaction_hash, key.event_signature, key.drop_type,
        )
        if exists:
            log.info(
                "Drop already recorded: tx=%s type=%d", key.transaction_hash, key.drop_type,
            )
        return exists
