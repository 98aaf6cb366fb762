"""SQLite implementation of the LedgerStore protocol."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from dropledger.errors import ActivityNotFoundError, StorageError
from dropledger.models.records import (
    ACTIVITY_STATUS_FINISHED,
    AccountNftInfo,
    AccountNftUpdate,
    ActivityInfo,
    DropInfo,
    NftTier,
    TokenNft,
    TokenReceived,
    TokenSent,
)

log = logging.getLogger(__name__)

# uint256 ids and deadlines are stored as zero-padded decimal TEXT so equality
# and MAX() keep numeric order at full width. Token amounts are plain decimal TEXT.
UINT256_DIGITS = 78


def _uint(value: int) -> str:
    return f"{value:0{UINT256_DIGITS}d}"


SCHEMA = """
-- Merchant activities
CREATE TABLE IF NOT EXISTS activity_info (
    activity_id TEXT PRIMARY KEY,
    business_name TEXT NOT NULL,
    business_account TEXT NOT NULL,
    activity_content TEXT NOT NULL,
    latitude_longitude TEXT NOT NULL,
    activity_create_time INTEGER NOT NULL,
    activity_deadline TEXT NOT NULL,
    drop_type INTEGER NOT NULL,
    drop_number TEXT NOT NULL,
    min_drop_amt TEXT NOT NULL,
    max_drop_amt TEXT NOT NULL,
    token_contract_addr TEXT NOT NULL,
    activity_status INTEGER NOT NULL DEFAULT 1,
    already_drop_number INTEGER NOT NULL DEFAULT 0,
    return_amount TEXT NOT NULL DEFAULT '0',
    mined_amount TEXT NOT NULL DEFAULT '0'
);
CREATE INDEX IF NOT EXISTS idx_activity_business ON activity_info(business_account);

-- Token ledger legs
CREATE TABLE IF NOT EXISTS token_sent (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    address TEXT NOT NULL,
    token_address TEXT NOT NULL,
    amount TEXT NOT NULL,
    description TEXT NOT NULL,
    timestamp INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_token_sent_address ON token_sent(address);

CREATE TABLE IF NOT EXISTS token_received (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    address TEXT NOT NULL,
    token_address TEXT NOT NULL,
    amount TEXT NOT NULL,
    description TEXT NOT NULL,
    timestamp INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_token_received_address ON token_received(address);

-- Minted merchant passes
CREATE TABLE IF NOT EXISTS token_nft (
    token_id TEXT PRIMARY KEY,
    who TEXT NOT NULL,
    business_name TEXT NOT NULL,
    description TEXT NOT NULL,
    img_url TEXT NOT NULL,
    business_address TEXT NOT NULL,
    website TEXT NOT NULL,
    social TEXT NOT NULL,
    contract_address TEXT NOT NULL,
    cost_value TEXT NOT NULL,
    deadline TEXT NOT NULL,
    nft_type INTEGER NOT NULL
);

-- Per-account pass expiry
CREATE TABLE IF NOT EXISTS account_nft_info (
    address TEXT PRIMARY KEY,
    basic_deadline TEXT NOT NULL,
    pro_deadline TEXT NOT NULL
);

-- Drop legs, one row per (tx, signature, drop type)
CREATE TABLE IF NOT EXISTS drop_info (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    address TEXT NOT NULL,
    drop_amount TEXT NOT NULL,
    activity_id TEXT NOT NULL REFERENCES activity_info(activity_id),
    drop_type INTEGER NOT NULL,
    timestamp INTEGER NOT NULL,
    transaction_hash TEXT NOT NULL,
    event_signature TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_drop_info_key
    ON drop_info(transaction_hash, event_signature, drop_type);
CREATE INDEX IF NOT EXISTS idx_drop_info_activity ON drop_info(activity_id);
"""


class SQLiteLedgerStore:
    """SQLite-backed implementation of the LedgerStore protocol.

    The connection runs in autocommit mode; ``transaction()`` opens an
    explicit BEGIN/COMMIT scope. Scopes are serialized on an asyncio lock
    because every coroutine shares the one connection.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path, isolation_level=None)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Transactions ───────────────────────────────────────

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLiteLedgerStore]:
        async with self._lock:
            try:
                await self.db.execute("BEGIN IMMEDIATE")
            except aiosqlite.Error as exc:
                raise StorageError(f"begin failed: {exc}") from exc

            try:
                yield self
            except aiosqlite.IntegrityError as exc:
                await self._rollback()
                raise StorageError(str(exc), retryable=False) from exc
            except aiosqlite.Error as exc:
                await self._rollback()
                raise StorageError(str(exc)) from exc
            except OverflowError as exc:
                await self._rollback()
                raise StorageError(f"value out of range: {exc}", retryable=False) from exc
            except BaseException:
                await self._rollback()
                raise

            try:
                await self.db.execute("COMMIT")
            except aiosqlite.Error as exc:
                await self._rollback()
                raise StorageError(f"commit failed: {exc}") from exc

    async def _rollback(self) -> None:
        if self.db.in_transaction:
            await self.db.execute("ROLLBACK")
            log.debug("Transaction rolled back")

    # ── Activities ─────────────────────────────────────────

    async def store_activity(self, info: ActivityInfo) -> None:
        await self.db.execute(
            "INSERT INTO activity_info"
            " (activity_id, business_name, business_account, activity_content,"
            "  latitude_longitude, activity_create_time, activity_deadline,"
            "  drop_type, drop_number, min_drop_amt, max_drop_amt, token_contract_addr,"
            "  activity_status, already_drop_number, return_amount, mined_amount)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                _uint(info.activity_id), info.business_name, info.business_account,
                info.activity_content, info.latitude_longitude,
                info.activity_create_time, _uint(info.activity_deadline),
                info.drop_type, _uint(info.drop_number),
                str(info.min_drop_amt), str(info.max_drop_amt),
                info.token_contract_addr, info.activity_status,
                info.already_drop_number,
                str(info.return_amount), str(info.mined_amount),
            ),
        )

    async def get_activity(self, activity_id: int) -> ActivityInfo | None:
        async with self.db.execute(
            "SELECT * FROM activity_info WHERE activity_id=?", (_uint(activity_id),)
        ) as cur:
            row = await cur.fetchone()
            return _row_to_activity(row) if row else None

    async def finish_activity(
        self, activity_id: int, return_amount: int, mined_amount: int,
    ) -> None:
        cur = await self.db.execute(
            "UPDATE activity_info SET activity_status=?, return_amount=?, mined_amount=?"
            " WHERE activity_id=?",
            (ACTIVITY_STATUS_FINISHED, str(return_amount), str(mined_amount), _uint(activity_id)),
        )
        if cur.rowcount == 0:
            raise ActivityNotFoundError(activity_id)

    async def increment_dropped(self, activity_id: int) -> None:
        cur = await self.db.execute(
            "UPDATE activity_info SET already_drop_number = already_drop_number + 1"
            " WHERE activity_id=?",
            (_uint(activity_id),),
        )
        if cur.rowcount == 0:
            raise ActivityNotFoundError(activity_id)

    # ── Token ledger ───────────────────────────────────────

    async def store_token_sent(self, record: TokenSent) -> None:
        await self.db.execute(
            "INSERT INTO token_sent (address, token_address, amount, description, timestamp)"
            " VALUES (?, ?, ?, ?, ?)",
            (
                record.address, record.token_address, str(record.amount),
                record.description, record.timestamp,
            ),
        )

    async def store_token_received(self, record: TokenReceived) -> None:
        await self.db.execute(
            "INSERT INTO token_received (address, token_address, amount, description, timestamp)"
            " VALUES (?, ?, ?, ?, ?)",
            (
                record.address, record.token_address, str(record.amount),
                record.description, record.timestamp,
            ),
        )

    async def get_token_sent(self, address: str) -> list[TokenSent]:
        async with self.db.execute(
            "SELECT * FROM token_sent WHERE address=? ORDER BY id", (address,)
        ) as cur:
            return [
                TokenSent(
                    address=row["address"],
                    token_address=row["token_address"],
                    amount=int(row["amount"]),
                    description=row["description"],
                    timestamp=row["timestamp"],
                )
                async for row in cur
            ]

    async def get_token_received(self, address: str) -> list[TokenReceived]:
        async with self.db.execute(
            "SELECT * FROM token_received WHERE address=? ORDER BY id", (address,)
        ) as cur:
            return [
                TokenReceived(
                    address=row["address"],
                    token_address=row["token_address"],
                    amount=int(row["amount"]),
                    description=row["description"],
                    timestamp=row["timestamp"],
                )
                async for row in cur
            ]

    # ── NFTs ───────────────────────────────────────────────

    async def store_token_nft(self, token: TokenNft) -> None:
        await self.db.execute(
            "INSERT INTO token_nft"
            " (token_id, who, business_name, description, img_url, business_address,"
            "  website, social, contract_address, cost_value, deadline, nft_type)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                _uint(token.token_id), token.who, token.business_name, token.description,
                token.img_url, token.business_address, token.website, token.social,
                token.contract_address, str(token.cost_value), _uint(token.deadline),
                token.nft_type,
            ),
        )

    async def get_token_nft(self, token_id: int) -> TokenNft | None:
        async with self.db.execute(
            "SELECT * FROM token_nft WHERE token_id=?", (_uint(token_id),)
        ) as cur:
            row = await cur.fetchone()
            if row:
                return TokenNft(
                    token_id=int(row["token_id"]),
                    who=row["who"],
                    business_name=row["business_name"],
                    description=row["description"],
                    img_url=row["img_url"],
                    business_address=row["business_address"],
                    website=row["website"],
                    social=row["social"],
                    contract_address=row["contract_address"],
                    cost_value=int(row["cost_value"]),
                    deadline=int(row["deadline"]),
                    nft_type=row["nft_type"],
                )
        return None

    async def upsert_account_nft(self, update: AccountNftUpdate) -> None:
        column = update.tier.expiry_field
        deadlines = {
            tier.expiry_field: _uint(update.deadline if tier is update.tier else 0)
            for tier in NftTier
        }
        await self.db.execute(
            "INSERT INTO account_nft_info (address, basic_deadline, pro_deadline)"
            " VALUES (?, ?, ?)"
            f" ON CONFLICT(address) DO UPDATE SET {column}=MAX({column}, excluded.{column})",
            (update.address, deadlines["basic_deadline"], deadlines["pro_deadline"]),
        )

    async def get_account_nft(self, address: str) -> AccountNftInfo | None:
        async with self.db.execute(
            "SELECT * FROM account_nft_info WHERE address=?", (address,)
        ) as cur:
            row = await cur.fetchone()
            if row:
                return AccountNftInfo(
                    address=row["address"],
                    basic_deadline=int(row["basic_deadline"]),
                    pro_deadline=int(row["pro_deadline"]),
                )
        return None

    # ── Drops ──────────────────────────────────────────────

    async def store_drop(self, drop: DropInfo) -> None:
        await self.db.execute(
            "INSERT INTO drop_info"
            " (address, drop_amount, activity_id, drop_type, timestamp,"
            "  transaction_hash, event_signature)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                drop.address, str(drop.drop_amount), _uint(drop.activity_id), drop.drop_type,
                drop.timestamp, drop.transaction_hash, drop.event_signature,
            ),
        )

    async def drop_exists(
        self, transaction_hash: str, event_signature: str, drop_type: int,
    ) -> bool:
        async with self.db.execute(
            "SELECT 1 FROM drop_info"
            " WHERE transaction_hash=? AND event_signature=? AND drop_type=?",
            (transaction_hash, event_signature, drop_type),
        ) as cur:
            return await cur.fetchone() is not None

    async def get_drops(self, activity_id: int) -> list[DropInfo]:
        async with self.db.execute(
            "SELECT * FROM drop_info WHERE activity_id=? ORDER BY id", (_uint(activity_id),)
        ) as cur:
            return [_row_to_drop(row) async for row in cur]


# ── Row converters ─────────────────────────────────────────


def _row_to_activity(row: aiosqlite.Row) -> ActivityInfo:
    return ActivityInfo(
        activity_id=int(row["activity_id"]),
        business_name=row["business_name"],
        business_account=row["business_account"],
        activity_content=row["activity_content"],
        latitude_longitude=row["latitude_longitude"],
        activity_create_time=row["activity_create_time"],
        activity_deadline=int(row["activity_deadline"]),
        drop_type=row["drop_type"],
        drop_number=int(row["drop_number"]),
        min_drop_amt=int(row["min_drop_amt"]),
        max_drop_amt=int(row["max_drop_amt"]),
        token_contract_addr=row["token_contract_addr"],
        activity_status=row["activity_status"],
        already_drop_number=row["already_drop_number"],
        return_amount=int(row["return_amount"]),
        mined_amount=int(row["mined_amount"]),
    )


def _row_to_drop(row: aiosqlite.Row) -> DropInfo:
    return DropInfo(
        address=row["address"],
        drop_amount=int(row["drop_amount"]),
        activity_id=int(row["activity_id"]),
        drop_type=row["drop_type"],
        timestamp=row["timestamp"],
        transaction_hash=row["transaction_hash"],
        event_signature=row["event_signature"],
    )
