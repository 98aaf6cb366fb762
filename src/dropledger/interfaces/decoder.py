"""EventDecoder protocol - turns raw logs into typed decoded events."""

from __future__ import annotations

from typing import Protocol

from dropledger.models.events import DecodedEvent, EventKind, RawLog


class EventDecoder(Protocol):
    """Pure ABI decoder shared by all handlers."""

    def decode(self, kind: EventKind, raw_log: RawLog) -> DecodedEvent:
        """Decode ``raw_log`` as ``kind``. Raises DecodeError on shape mismatch."""
        ...

    def kind_for(self, event_signature: str) -> EventKind | None:
        """Map a topic0 to the event kind it identifies, if any."""
        ...

    def topic0(self, kind: EventKind) -> str:
        ...
