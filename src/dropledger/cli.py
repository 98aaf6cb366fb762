"""CLI entry point for dropledger."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from dropledger.config import load_config
from dropledger.errors import DecodeError, EventProcessingError
from dropledger.evm.decoder import AbiEventDecoder
from dropledger.evm.logs import event_from_rpc_log
from dropledger.models.events import EventKind
from dropledger.models.records import ProcessStatus
from dropledger.processing.handlers import EventProcessor
from dropledger.storage.sqlite import SQLiteLedgerStore

log = logging.getLogger(__name__)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """dropledger - commit merchant contract events to the ledger database."""
    ctx.ensure_object(dict)
    cfg = load_config(config_path)
    ctx.obj["config"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show effective configuration."""
    cfg = ctx.obj["config"]
    click.echo(f"DB path:    {cfg.db_path}")
    click.echo(f"Platform:   {cfg.platform_address}")
    click.echo(f"Log level:  {cfg.log_level}")


@cli.command()
def signatures() -> None:
    """Print the topic0 of every handled event."""
    decoder = AbiEventDecoder()
    for kind in EventKind:
        click.echo(f"{kind.value:<16} {decoder.topic0(kind)}")


# ── Storage ────────────────────────────────────────────


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the ledger schema."""
    cfg = ctx.obj["config"]

    async def _init():
        store = SQLiteLedgerStore(cfg.db_path)
        await store.initialize()
        await store.close()

    asyncio.run(_init())
    click.echo(f"Initialized {cfg.db_path}")


@cli.command()
@click.argument("activity_id", type=int)
@click.pass_context
def activity(ctx: click.Context, activity_id: int) -> None:
    """Show an activity and its drops."""
    cfg = ctx.obj["config"]

    async def _show() -> bool:
        store = SQLiteLedgerStore(cfg.db_path)
        await store.initialize()
        try:
            info = await store.get_activity(activity_id)
            if info is None:
                return False
            click.echo(f"Activity:   {info.activity_id} ({info.business_name})")
            click.echo(f"  Business: {info.business_account}")
            click.echo(f"  Token:    {info.token_contract_addr}")
            click.echo(f"  Status:   {info.activity_status}")
            click.echo(f"  Dropped:  {info.already_drop_number}/{info.drop_number}")
            click.echo(f"  Returned: {info.return_amount}")
            click.echo(f"  Mined:    {info.mined_amount}")
            for drop in await store.get_drops(activity_id):
                click.echo(
                    f"  drop type={drop.drop_type} {drop.address} "
                    f"{drop.drop_amount} tx={drop.transaction_hash}"
                )
            return True
        finally:
            await store.close()

    if not asyncio.run(_show()):
        click.echo(f"Activity {activity_id} not found", err=True)
        sys.exit(1)


# ── Ingest ─────────────────────────────────────────────


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def ingest(ctx: click.Context, path: str) -> None:
    """Process a JSON-lines file of raw logs.

    Malformed logs are reported and skipped. Any other failure stops the run
    so the remaining logs can be replayed once it is resolved.
    """
    cfg = ctx.obj["config"]

    async def _ingest() -> tuple[dict[str, int], bool]:
        store = SQLiteLedgerStore(cfg.db_path)
        await store.initialize()
        processor = EventProcessor(AbiEventDecoder(), store, cfg.platform_address)
        counts = {status.value: 0 for status in ProcessStatus}
        counts["quarantined"] = 0
        try:
            with open(path) as f:
                for lineno, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        event = event_from_rpc_log(json.loads(line))
                        result = await processor.process(event)
                    except (DecodeError, json.JSONDecodeError) as exc:
                        log.warning("Quarantined line %d: %s", lineno, exc)
                        counts["quarantined"] += 1
                        continue
                    except EventProcessingError as exc:
                        log.error("Line %d aborted: %s", lineno, exc)
                        click.echo(
                            f"Stopped at line {lineno} "
                            f"({'retryable' if exc.retryable else 'fatal'}): {exc}",
                            err=True,
                        )
                        return counts, False
                    counts[result.status.value] += 1
        finally:
            await store.close()
        return counts, True

    counts, completed = asyncio.run(_ingest())
    for name, count in counts.items():
        click.echo(f"{name:<12} {count}")
    if not completed:
        sys.exit(1)
