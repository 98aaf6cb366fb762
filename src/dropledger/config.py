"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from dropledger.models.config import SyncConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "DROPLEDGER_",
) -> SyncConfig:
    """Load sync configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (DROPLEDGER_DB_PATH, etc.)
        2. TOML config file
        3. Defaults from SyncConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = SyncConfig()

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    if v := chain.get("platform_address"):
        cfg.platform_address = str(v)

    # ── Logging section ────────────────────────────────────
    logging_ = raw.get("logging", {})
    if v := logging_.get("log_level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if db_path := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db_path
    if platform := os.environ.get(f"{env_prefix}PLATFORM_ADDRESS"):
        cfg.platform_address = platform
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg
