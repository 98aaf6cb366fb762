"""ABI event decoder - raw EVM logs into typed event dataclasses.

Built once from the event ABI fragments; the per-kind specs (topic0, indexed
and data types) are computed up front and kept in a read-only mapping, so a
single decoder instance can be shared by every handler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, encode_hex, keccak, to_checksum_address

from dropledger.errors import DecodeError
from dropledger.evm.abi import EVENT_ABIS, AbiFragment, event_signature
from dropledger.models.events import DecodedEvent, EventKind, RawLog

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class _EventSpec:
    name: str
    topic0: str  # lowercased 0x-hex
    indexed: tuple[tuple[str, str], ...]  # (name, type) in topic order
    data: tuple[tuple[str, str], ...]  # (name, type) in data order
    factory: type


def _build_spec(fragment: AbiFragment, factory: type) -> _EventSpec:
    topic0 = encode_hex(keccak(text=event_signature(fragment))).lower()
    indexed = tuple((a["name"], a["type"]) for a in fragment["inputs"] if a.get("indexed"))
    data = tuple((a["name"], a["type"]) for a in fragment["inputs"] if not a.get("indexed"))
    return _EventSpec(fragment["name"], topic0, indexed, data, factory)


def _normalize(typ: str, value: Any) -> Any:
    if typ == "address":
        return to_checksum_address(value)
    return value


class AbiEventDecoder:
    """Implements the EventDecoder protocol over a fixed set of event ABIs."""

    def __init__(
        self, abis: Mapping[EventKind, tuple[AbiFragment, type]] | None = None,
    ) -> None:
        specs = {
            kind: _build_spec(fragment, factory)
            for kind, (fragment, factory) in (abis or EVENT_ABIS).items()
        }
        self._specs: Mapping[EventKind, _EventSpec] = MappingProxyType(specs)
        self._kinds: Mapping[str, EventKind] = MappingProxyType(
            {spec.topic0: kind for kind, spec in specs.items()}
        )

    def topic0(self, kind: EventKind) -> str:
        return self._specs[kind].topic0

    def kind_for(self, event_signature: str) -> EventKind | None:
        return self._kinds.get(event_signature.lower())

    def decode(self, kind: EventKind, raw_log: RawLog) -> DecodedEvent:
        spec = self._specs.get(kind)
        if spec is None:
            raise DecodeError(f"no ABI registered for {kind.value}")

        topics = raw_log.topics
        if not topics or topics[0].lower() != spec.topic0:
            raise DecodeError(
                f"{spec.name}: topic0 {topics[0] if topics else None} does not match {spec.topic0}"
            )
        if len(topics) != len(spec.indexed) + 1:
            raise DecodeError(
                f"{spec.name}: expected {len(spec.indexed) + 1} topics, got {len(topics)}"
            )

        values: dict[str, Any] = {}
        try:
            for (name, typ), topic in zip(spec.indexed, topics[1:]):
                raw = decode_hex(topic)
                if len(raw) != 32:
                    raise DecodeError(f"{spec.name}: topic for {name} is {len(raw)} bytes")
                (values[name],) = abi_decode([typ], raw)

            data_types = [typ for _, typ in spec.data]
            decoded = abi_decode(data_types, raw_log.data) if data_types else ()
            for (name, _), value in zip(spec.data, decoded):
                values[name] = value
        except (DecodingError, ValueError) as exc:
            log.debug("Failed to decode %s log at block %d: %s", spec.name, raw_log.block_number, exc)
            raise DecodeError(f"{spec.name}: {exc}") from exc

        for name, typ in spec.indexed + spec.data:
            values[name] = _normalize(typ, values[name])
        return spec.factory(**values)
