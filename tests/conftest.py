"""Shared fixtures for dropledger tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from dropledger.evm.decoder import AbiEventDecoder
from dropledger.models.config import SyncConfig
from dropledger.processing.handlers import EventProcessor
from dropledger.storage.sqlite import SQLiteLedgerStore

from tests.factories import EVENT_MANAGER, NFT_MANAGER, TOKEN

PLATFORM_ADDRESS = EVENT_MANAGER


def pytest_configure(config):
    """Add deployment info to the report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Event Manager"] = EVENT_MANAGER
    meta["NFT Manager"] = NFT_MANAGER
    meta["Token"] = TOKEN


def make_test_config(**overrides) -> SyncConfig:
    """Build a SyncConfig suitable for testing."""
    defaults = dict(
        db_path=":memory:",
        platform_address=PLATFORM_ADDRESS,
        log_level="debug",
    )
    defaults.update(overrides)
    return SyncConfig(**defaults)


@pytest.fixture
def test_config():
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteLedgerStore."""
    s = SQLiteLedgerStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def decoder():
    return AbiEventDecoder()


@pytest.fixture
def processor(decoder, store, test_config):
    """EventProcessor wired to the in-memory store."""
    return EventProcessor(decoder, store, test_config.platform_address)
