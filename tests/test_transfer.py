"""ERC20 transfers and event routing."""

from __future__ import annotations

from dataclasses import replace

import pytest
from eth_abi import encode
from eth_utils import encode_hex

from dropledger.errors import DecodeError
from dropledger.models.events import EventKind
from dropledger.models.records import TRANSFER_DESCRIPTION, ProcessStatus

from tests.factories import (
    EVENT_MANAGER,
    MERCHANT,
    NFT_MANAGER,
    OTHER,
    TOKEN,
    make_transfer_event,
)


async def test_transfer_records_both_legs(processor, store):
    event = make_transfer_event(sender=MERCHANT, recipient=OTHER, value=10**21)
    result = await processor.process(event)

    assert result.kind == EventKind.TRANSFER
    assert result.status == ProcessStatus.COMMITTED

    sent = await store.get_token_sent(MERCHANT)
    received = await store.get_token_received(OTHER)
    assert [(s.amount, s.token_address) for s in sent] == [(10**21, TOKEN)]
    assert [(r.amount, r.token_address) for r in received] == [(10**21, TOKEN)]
    assert sent[0].description == received[0].description == TRANSFER_DESCRIPTION


@pytest.mark.parametrize("sender,recipient", [
    (EVENT_MANAGER, OTHER),
    (MERCHANT, EVENT_MANAGER),
])
async def test_transfer_with_platform_endpoint_is_filtered(processor, store, sender, recipient):
    result = await processor.process(make_transfer_event(sender=sender, recipient=recipient))

    assert result.status == ProcessStatus.FILTERED
    assert result.records == 0
    assert await store.get_token_sent(sender) == []
    assert await store.get_token_received(recipient) == []


async def test_unknown_signature_is_ignored(processor, store):
    event = make_transfer_event()
    unknown = replace(event, event_signature="0x" + "12" * 32)

    result = await processor.process(unknown)

    assert result.kind is None
    assert result.status == ProcessStatus.IGNORED
    assert await store.get_token_sent(MERCHANT) == []


async def test_malformed_transfer_is_decode_error(processor, store):
    event = make_transfer_event()
    broken = replace(event, log=replace(event.log, data=b"\x01"))

    with pytest.raises(DecodeError) as excinfo:
        await processor.process(broken)

    assert not excinfo.value.retryable
    assert await store.get_token_sent(MERCHANT) == []


async def test_erc721_transfer_is_ignored(processor, store):
    """Same topic0 as ERC20 Transfer, but the token id is a fourth topic."""
    event = make_transfer_event(address=NFT_MANAGER)
    token_id_topic = encode_hex(encode(["uint256"], [7]))
    nft = replace(event, log=replace(event.log, topics=event.log.topics + (token_id_topic,), data=b""))

    result = await processor.process(nft)

    assert result.kind == EventKind.TRANSFER
    assert result.status == ProcessStatus.IGNORED
    assert await store.get_token_sent(MERCHANT) == []
