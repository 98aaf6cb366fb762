"""EVM log decoding components."""

from dropledger.evm.decoder import AbiEventDecoder
from dropledger.evm.logs import event_from_rpc_log

__all__ = ["AbiEventDecoder", "event_from_rpc_log"]
