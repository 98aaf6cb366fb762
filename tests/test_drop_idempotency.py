"""Redelivered Drop events are committed exactly once."""

from __future__ import annotations

from dropledger.models.records import DropKey, ProcessStatus
from dropledger.processing.writer import IdempotencyGuard

from tests.factories import (
    RECIPIENT,
    make_activity_add_event,
    make_drop_event,
    tx_hash,
)


async def test_same_drop_twice_commits_once(processor, store):
    await processor.process(make_activity_add_event(activity_id=1))
    drop = make_drop_event(activity_id=1, drop_amt=50)

    first = await processor.process(drop)
    second = await processor.process(drop)

    assert first.status == ProcessStatus.COMMITTED
    assert second.status == ProcessStatus.DUPLICATE
    assert second.records == 0

    drops = await store.get_drops(1)
    assert sorted(d.drop_type for d in drops) == [1, 2]
    assert len(await store.get_token_received(RECIPIENT)) == 1
    assert (await store.get_activity(1)).already_drop_number == 1


async def test_distinct_transactions_are_separate_drops(processor, store):
    await processor.process(make_activity_add_event(activity_id=1))

    await processor.process(make_drop_event(activity_id=1, transaction_hash=tx_hash(20)))
    await processor.process(make_drop_event(activity_id=1, transaction_hash=tx_hash(21)))

    assert len(await store.get_drops(1)) == 4
    assert (await store.get_activity(1)).already_drop_number == 2


async def test_guard_sees_committed_legs(processor, store):
    await processor.process(make_activity_add_event(activity_id=1))
    drop = make_drop_event(activity_id=1)
    await processor.process(drop)

    guard = IdempotencyGuard()
    async with store.transaction() as tx:
        for drop_type in (1, 2):
            key = DropKey(drop.transaction_hash, drop.event_signature, drop_type)
            assert await guard.seen(tx, key)
        assert not await guard.seen(tx, DropKey(tx_hash(99), drop.event_signature, 1))
