"""Event ABI fragments for the merchant, NFT manager and ERC20 contracts.

Input names match the fields of the decoded event dataclasses so a decoded
value dict can be passed straight to the constructor.
"""

from __future__ import annotations

from typing import Any

from dropledger.models.events import (
    ActivityAddEvent,
    ActivityFinishEvent,
    CreateNftEvent,
    DropEvent,
    EventKind,
    TransferEvent,
)

AbiFragment = dict[str, Any]


def _arg(name: str, typ: str, indexed: bool = False) -> dict[str, Any]:
    return {"name": name, "type": typ, "indexed": indexed}


ACTIVITY_ADD: AbiFragment = {
    "type": "event",
    "name": "ActivityAdd",
    "inputs": [
        _arg("who", "address", indexed=True),
        _arg("activity_id", "uint256", indexed=True),
        _arg("total_drop_amts", "uint256"),
        _arg("business_name", "string"),
        _arg("activity_content", "string"),
        _arg("latitude_longitude", "string"),
        _arg("activity_deadline", "uint256"),
        _arg("drop_type", "uint8"),
        _arg("drop_number", "uint256"),
        _arg("min_drop_amt", "uint256"),
        _arg("max_drop_amt", "uint256"),
        _arg("token_contract_addr", "address"),
    ],
}

ACTIVITY_FINISH: AbiFragment = {
    "type": "event",
    "name": "ActivityFinish",
    "inputs": [
        _arg("activity_id", "uint256", indexed=True),
        _arg("token_contract_addr", "address"),
        _arg("return_amount", "uint256"),
        _arg("mined_amount", "uint256"),
    ],
}

DROP: AbiFragment = {
    "type": "event",
    "name": "Drop",
    "inputs": [
        _arg("who", "address", indexed=True),
        _arg("activity_id", "uint256", indexed=True),
        _arg("drop_amt", "uint256"),
    ],
}

CREATE_NFT: AbiFragment = {
    "type": "event",
    "name": "CreateNFT",
    "inputs": [
        _arg("creator", "address", indexed=True),
        _arg("token_id", "uint256"),
        _arg("business_name", "string"),
        _arg("description", "string"),
        _arg("img_url", "string"),
        _arg("business_address", "string"),
        _arg("website", "string"),
        _arg("social", "string"),
        _arg("value", "uint256"),
        _arg("deadline", "uint256"),
        _arg("nft_type", "uint8"),
    ],
}

ERC20_TRANSFER: AbiFragment = {
    "type": "event",
    "name": "Transfer",
    "inputs": [
        _arg("sender", "address", indexed=True),
        _arg("recipient", "address", indexed=True),
        _arg("value", "uint256"),
    ],
}

# kind -> (fragment, decoded dataclass)
EVENT_ABIS: dict[EventKind, tuple[AbiFragment, type]] = {
    EventKind.ACTIVITY_ADD: (ACTIVITY_ADD, ActivityAddEvent),
    EventKind.ACTIVITY_FINISH: (ACTIVITY_FINISH, ActivityFinishEvent),
    EventKind.MINT_NFT: (CREATE_NFT, CreateNftEvent),
    EventKind.DROP: (DROP, DropEvent),
    EventKind.TRANSFER: (ERC20_TRANSFER, TransferEvent),
}


def event_signature(fragment: AbiFragment) -> str:
    """Canonical signature text, e.g. ``Drop(address,uint256,uint256)``."""
    types = ",".join(arg["type"] for arg in fragment["inputs"])
    return f"{fragment['name']}({types})"
