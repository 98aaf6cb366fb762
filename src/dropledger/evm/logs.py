"""Conversion of eth_getLogs-shaped JSON entries into ContractEvent values."""

from __future__ import annotations

from typing import Any

from eth_utils import decode_hex, to_checksum_address

from dropledger.errors import DecodeError
from dropledger.models.events import ContractEvent, RawLog


def _quantity(value: Any) -> int:
    """JSON-RPC quantities arrive as 0x-hex strings; files may carry plain ints."""
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


def event_from_rpc_log(entry: dict[str, Any]) -> ContractEvent:
    """Build a ContractEvent from one RPC log object.

    The entry needs ``timestamp`` (or ``blockTimestamp``) next to the usual
    eth_getLogs fields.
    """
    try:
        topics = tuple(str(t).lower() for t in entry.get("topics", []))
        if not topics:
            raise DecodeError("log has no topics")
        ts = entry.get("timestamp", entry.get("blockTimestamp"))
        if ts is None:
            raise DecodeError("log has no block timestamp")
        address = to_checksum_address(entry["address"])
        raw = RawLog(
            address=address,
            topics=topics,
            data=decode_hex(entry.get("data") or "0x"),
            block_number=_quantity(entry.get("blockNumber", 0)),
            log_index=_quantity(entry.get("logIndex", 0)),
        )
        return ContractEvent(
            log=raw,
            contract_address=address,
            transaction_hash=str(entry["transactionHash"]).lower(),
            event_signature=topics[0],
            timestamp=_quantity(ts),
        )
    except (AttributeError, KeyError, ValueError, TypeError) as exc:
        raise DecodeError(f"malformed log entry: {exc}") from exc
