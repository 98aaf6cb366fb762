"""Config loading: defaults, TOML file, env overrides."""

from __future__ import annotations

from dropledger.config import load_config
from dropledger.models.config import DEFAULT_PLATFORM_ADDRESS


def test_defaults_without_file(monkeypatch):
    for name in ("DB_PATH", "PLATFORM_ADDRESS", "LOG_LEVEL"):
        monkeypatch.delenv(f"DROPLEDGER_{name}", raising=False)

    cfg = load_config(None)

    assert cfg.platform_address == DEFAULT_PLATFORM_ADDRESS
    assert cfg.log_level == "info"
    assert cfg.db_path.endswith("ledger.db")
    assert "~" not in cfg.db_path


def test_toml_then_env_priority(tmp_path, monkeypatch):
    config_file = tmp_path / "dropledger.toml"
    config_file.write_text(
        '[storage]\n'
        f'db_path = "{tmp_path / "a.db"}"\n'
        '[chain]\n'
        'platform_address = "0x0000000000000000000000000000000000000001"\n'
        '[logging]\n'
        'log_level = "warning"\n'
    )
    monkeypatch.delenv("DROPLEDGER_DB_PATH", raising=False)
    monkeypatch.delenv("DROPLEDGER_LOG_LEVEL", raising=False)
    monkeypatch.setenv("DROPLEDGER_PLATFORM_ADDRESS", "0x0000000000000000000000000000000000000002")

    cfg = load_config(config_file)

    assert cfg.db_path == str(tmp_path / "a.db")
    assert cfg.log_level == "warning"
    assert cfg.platform_address == "0x0000000000000000000000000000000000000002"


def test_memory_db_path_is_kept(monkeypatch):
    monkeypatch.setenv("DROPLEDGER_DB_PATH", ":memory:")
    assert load_config(None).db_path == ":memory:"
