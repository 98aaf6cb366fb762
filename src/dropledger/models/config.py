"""Configuration models for the ledger sync."""

from __future__ import annotations

from dataclasses import dataclass

# Event-manager contract of the production deployment. Token transfers in or
# out of it are escrow movements already recorded by the activity handlers.
DEFAULT_PLATFORM_ADDRESS = "0x2CAf752814f244b3778e30c27051cc6B45CB1fc9"


@dataclass
class SyncConfig:
    """Complete ledger sync configuration."""

    # Storage
    db_path: str = "~/.dropledger/ledger.db"

    # Chain
    platform_address: str = DEFAULT_PLATFORM_ADDRESS

    # Logging
    log_level: str = "info"
