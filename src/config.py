"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from eth_utils import is_hex_address

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://mainnet.base.org"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    name: str = "base"
    chain_id: int = 8453
    rpc_url: str = DEFAULT_RPC_URL
    rpc_timeout: int = 30


@dataclass(frozen=True)
class ContractsConfig:
    mtoken: str = "0x628ff693426583D9a7FB391E54366292F509D457"
    # Risk-management contract; carried for completeness, not read.
    comptroller: str = "0xfBb21d0380beE3312B33c4353c8936a0F13EF26C"
    start_block: int = 0


@dataclass(frozen=True)
class IndexerConfig:
    poll_interval_seconds: float = 2.0
    max_block_range: int = 500
    confirmations: int = 0


@dataclass(frozen=True)
class DatabaseConfig:
    path: str = "positions.sqlite"


@dataclass(frozen=True)
class AppConfig:
    chain: ChainConfig = field(default_factory=ChainConfig)
    contracts: ContractsConfig = field(default_factory=ContractsConfig)
    indexer: IndexerConfig = field(default_factory=IndexerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    return ChainConfig(
        name=raw.get("name", "base"),
        chain_id=int(raw.get("chain_id", 8453)),
        rpc_url=raw.get("rpc_url") or DEFAULT_RPC_URL,
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
    )


def _build_contracts(raw: dict[str, Any]) -> ContractsConfig:
    return ContractsConfig(
        mtoken=raw.get("mtoken", ContractsConfig.mtoken),
        comptroller=raw.get("comptroller", ContractsConfig.comptroller),
        start_block=int(raw.get("start_block", 0)),
    )


def _build_indexer(raw: dict[str, Any]) -> IndexerConfig:
    return IndexerConfig(
        poll_interval_seconds=float(raw.get("poll_interval_seconds", 2.0)),
        max_block_range=int(raw.get("max_block_range", 500)),
        confirmations=int(raw.get("confirmations", 0)),
    )


def _build_database(raw: dict[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(path=raw.get("path") or "positions.sqlite")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chain=_build_chain(raw.get("chain") or {}),
        contracts=_build_contracts(raw.get("contracts") or {}),
        indexer=_build_indexer(raw.get("indexer") or {}),
        database=_build_database(raw.get("database") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    for name in ("mtoken", "comptroller"):
        address = getattr(cfg.contracts, name)
        if not is_hex_address(address):
            raise ValueError(f"Contract '{name}' has an invalid address: {address!r}")

    if cfg.contracts.start_block < 0:
        raise ValueError("contracts.start_block must not be negative")
    if cfg.indexer.max_block_range < 1:
        raise ValueError("indexer.max_block_range must be at least 1")
    if cfg.indexer.confirmations < 0:
        raise ValueError("indexer.confirmations must not be negative")
    if not cfg.chain.rpc_url.startswith(("http://", "https://")):
        raise ValueError(f"Unsupported RPC URL: {cfg.chain.rpc_url!r}")
