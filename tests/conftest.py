"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Callable, Sequence

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address
from hexbytes import HexBytes

from src.chains.evm.abi import MTOKEN_EVENTS_ABI
from src.chains.evm.decoder import event_topic
from src.config import (
    AppConfig,
    ChainConfig,
    ContractsConfig,
    DatabaseConfig,
    IndexerConfig,
)
from src.store import SqliteStore

MTOKEN = "0x628ff693426583D9a7FB391E54366292F509D457"
COMPTROLLER = "0xfBb21d0380beE3312B33c4353c8936a0F13EF26C"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        name="base",
        chain_id=8453,
        rpc_url="https://rpc.example.com",
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_app_config(sample_chain_config: ChainConfig) -> AppConfig:
    return AppConfig(
        chain=sample_chain_config,
        contracts=ContractsConfig(mtoken=MTOKEN, comptroller=COMPTROLLER, start_block=1),
        indexer=IndexerConfig(poll_interval_seconds=0.01, max_block_range=5, confirmations=0),
        database=DatabaseConfig(path=":memory:"),
    )


SAMPLE_YAML = textwrap.dedent("""\
    chain:
      name: base
      chain_id: 8453
      rpc_url: "https://rpc.example.com"
      rpc_timeout: 10
    contracts:
      mtoken: "0x628ff693426583D9a7FB391E54366292F509D457"
      comptroller: "0xfBb21d0380beE3312B33c4353c8936a0F13EF26C"
      start_block: 100
    indexer:
      poll_interval_seconds: 1.5
      max_block_range: 250
      confirmations: 2
    database:
      path: "test.sqlite"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> SqliteStore:
    s = SqliteStore(":memory:")
    yield s
    s.close()


# ---------------------------------------------------------------------------
# Fake chain client
# ---------------------------------------------------------------------------


class FakeChainClient:
    """In-memory stand-in for ``EvmClient``.

    ``balances`` / ``borrows`` map lowercase addresses to uint values;
    ``failures`` holds ``(function_name, lowercase_address)`` pairs that raise.
    """

    def __init__(
        self,
        head: int = 0,
        logs: list[dict[str, Any]] | None = None,
        balances: dict[str, int] | None = None,
        borrows: dict[str, int] | None = None,
        failures: set[tuple[str, str]] | None = None,
    ) -> None:
        self.head = head
        self.logs = logs or []
        self.balances = balances or {}
        self.borrows = borrows or {}
        self.failures = failures or set()
        self.reads: list[tuple[str, str]] = []
        self.log_requests: list[tuple[int, int]] = []
        self.closed = False

    async def get_block_number(self) -> int:
        return self.head

    async def get_logs(
        self, address: str, from_block: int, to_block: int
    ) -> list[dict[str, Any]]:
        self.log_requests.append((from_block, to_block))
        return [lg for lg in self.logs if from_block <= lg["blockNumber"] <= to_block]

    async def read_contract(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        account = str(args[0]).lower()
        self.reads.append((function_name, account))
        if (function_name, account) in self.failures:
            raise RuntimeError("execution reverted")
        table = self.balances if function_name == "balanceOf" else self.borrows
        return table.get(account, 0)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_client() -> FakeChainClient:
    return FakeChainClient()


# ---------------------------------------------------------------------------
# Raw log builder
# ---------------------------------------------------------------------------


def _abi_value(typ: str, value: Any) -> Any:
    return to_checksum_address(value) if typ == "address" else value


def _make_log(
    name: str, block_number: int = 1, log_index: int = 0, **args: Any
) -> dict[str, Any]:
    """ABI-encode an MToken event the way a node returns it from eth_getLogs."""
    abi = next(e for e in MTOKEN_EVENTS_ABI if e["name"] == name)
    indexed = [i for i in abi["inputs"] if i["indexed"]]
    plain = [i for i in abi["inputs"] if not i["indexed"]]

    topics = [HexBytes(event_topic(abi))]
    for inp in indexed:
        topics.append(HexBytes(encode([inp["type"]], [_abi_value(inp["type"], args[inp["name"]])])))

    data = encode(
        [i["type"] for i in plain],
        [_abi_value(i["type"], args[i["name"]]) for i in plain],
    )
    return {
        "address": MTOKEN,
        "topics": topics,
        "data": HexBytes(data),
        "blockNumber": block_number,
        "logIndex": log_index,
        "transactionHash": HexBytes(b"\x01" * 32),
        "removed": False,
    }


@pytest.fixture()
def make_log() -> Callable[..., dict[str, Any]]:
    return _make_log
