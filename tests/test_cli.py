"""CLI commands against a temporary database."""

from __future__ import annotations

import json

from click.testing import CliRunner

from dropledger.cli import cli

from tests.factories import (
    make_activity_add_event,
    make_activity_finish_event,
    make_drop_event,
    make_mint_nft_event,
    make_transfer_event,
    to_rpc_log,
)


def _write_logs(path, events, extra_lines=()):
    with open(path, "w") as f:
        for event in events:
            f.write(json.dumps(to_rpc_log(event)) + "\n")
        for line in extra_lines:
            f.write(line + "\n")


def _counts(output):
    counts = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) == 2 and parts[1].isdigit():
            counts[parts[0]] = int(parts[1])
    return counts


def test_signatures_lists_every_kind():
    result = CliRunner().invoke(cli, ["signatures"])

    assert result.exit_code == 0
    assert "transfer" in result.output
    assert "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef" in result.output


def test_ingest_then_show_activity(tmp_path, monkeypatch):
    monkeypatch.setenv("DROPLEDGER_DB_PATH", str(tmp_path / "ledger.db"))
    logs = tmp_path / "logs.jsonl"
    _write_logs(
        logs,
        [
            make_activity_add_event(activity_id=1),
            make_drop_event(activity_id=1),
            make_drop_event(activity_id=1),  # redelivery
            make_transfer_event(),
        ],
        extra_lines=["not json"],
    )
    runner = CliRunner()

    result = runner.invoke(cli, ["ingest", str(logs)])
    assert result.exit_code == 0, result.output
    counts = _counts(result.output)
    assert counts["committed"] == 3
    assert counts["duplicate"] == 1
    assert counts["quarantined"] == 1

    result = runner.invoke(cli, ["activity", "1"])
    assert result.exit_code == 0, result.output
    assert "Dropped:  1/4" in result.output


def test_ingest_stops_on_missing_activity(tmp_path, monkeypatch):
    monkeypatch.setenv("DROPLEDGER_DB_PATH", str(tmp_path / "ledger.db"))
    logs = tmp_path / "logs.jsonl"
    _write_logs(logs, [make_drop_event(activity_id=5)])

    result = CliRunner().invoke(cli, ["ingest", str(logs)])

    assert result.exit_code == 1


def test_ingest_replay_is_all_duplicates(tmp_path, monkeypatch):
    monkeypatch.setenv("DROPLEDGER_DB_PATH", str(tmp_path / "ledger.db"))
    logs = tmp_path / "logs.jsonl"
    _write_logs(
        logs,
        [
            make_activity_add_event(activity_id=1),
            make_drop_event(activity_id=1),
            make_mint_nft_event(token_id=3),
            make_activity_finish_event(activity_id=1),
        ],
    )
    runner = CliRunner()

    first = runner.invoke(cli, ["ingest", str(logs)])
    assert first.exit_code == 0, first.output
    assert _counts(first.output)["committed"] == 4

    second = runner.invoke(cli, ["ingest", str(logs)])
    assert second.exit_code == 0, second.output
    counts = _counts(second.output)
    assert counts["committed"] == 0
    assert counts["duplicate"] == 4
