"""uint256 ids and deadlines at the top of their range."""

from __future__ import annotations

import pytest

from dropledger.errors import StorageError
from dropledger.models.records import ProcessStatus

from tests.factories import (
    MERCHANT,
    make_activity_add_event,
    make_drop_event,
    make_mint_nft_event,
    make_transfer_event,
)

UINT256_MAX = 2**256 - 1


async def test_activity_without_deadline_is_stored(processor, store):
    """type(uint256).max is the usual "no deadline" sentinel."""
    result = await processor.process(
        make_activity_add_event(activity_id=1, activity_deadline=UINT256_MAX)
    )

    assert result.status == ProcessStatus.COMMITTED
    assert (await store.get_activity(1)).activity_deadline == UINT256_MAX


async def test_activity_id_beyond_int64(processor, store):
    activity_id = 2**200 + 1
    await processor.process(make_activity_add_event(activity_id=activity_id, drop_number=2**70))
    result = await processor.process(make_drop_event(activity_id=activity_id))

    assert result.status == ProcessStatus.COMMITTED
    activity = await store.get_activity(activity_id)
    assert activity.drop_number == 2**70
    assert activity.already_drop_number == 1
    assert [d.activity_id for d in await store.get_drops(activity_id)] == [activity_id] * 2
    assert await store.get_activity(1) is None


async def test_nft_deadline_beyond_int64(processor, store):
    result = await processor.process(
        make_mint_nft_event(token_id=2**128, nft_type=1, deadline=2**64)
    )

    assert result.status == ProcessStatus.COMMITTED
    assert (await store.get_token_nft(2**128)).deadline == 2**64
    account = await store.get_account_nft(MERCHANT)
    assert account.pro_deadline == 2**64
    assert account.basic_deadline == 0


@pytest.mark.parametrize("first,second,expected", [
    (2**64, 2**63, 2**64),
    (9_000, 10_000, 10_000),
    (UINT256_MAX, 1, UINT256_MAX),
])
async def test_expiry_keeps_numeric_maximum(processor, store, first, second, expected):
    await processor.process(make_mint_nft_event(token_id=1, nft_type=2, deadline=first))
    await processor.process(make_mint_nft_event(token_id=2, nft_type=2, deadline=second))

    assert (await store.get_account_nft(MERCHANT)).basic_deadline == expected


async def test_unbindable_timestamp_is_permanent_storage_error(processor, store):
    with pytest.raises(StorageError) as excinfo:
        await processor.process(make_transfer_event(timestamp=2**64))

    assert not excinfo.value.retryable
    assert await store.get_token_sent(MERCHANT) == []
