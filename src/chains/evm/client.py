"""EVM JSON-RPC client built on web3's async provider."""
from __future__ import annotations

import logging
import ssl
from typing import Any, Sequence

import aiohttp
import certifi
from eth_utils import to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3

from ...config import ChainConfig

logger = logging.getLogger(__name__)


class EvmClient:
    """Read-only access to one EVM chain: head block, logs and view calls.

    Constructed once by the entry point and handed to every component that
    talks to the chain.
    """

    def __init__(self, config: ChainConfig, web3: AsyncWeb3 | None = None) -> None:
        self.rpc_url = config.rpc_url
        self.chain_id = config.chain_id
        self.timeout = config.rpc_timeout

        if web3 is None:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            web3 = AsyncWeb3(
                AsyncHTTPProvider(
                    self.rpc_url,
                    request_kwargs={
                        "timeout": aiohttp.ClientTimeout(total=self.timeout),
                        "ssl": ssl_context,
                    },
                )
            )
        self._w3 = web3
        self._contracts: dict[str, Any] = {}

    async def get_block_number(self) -> int:
        """Latest block number reported by the node."""
        return int(await self._w3.eth.block_number)

    async def get_logs(
        self, address: str, from_block: int, to_block: int
    ) -> list[dict[str, Any]]:
        """All logs emitted by ``address`` in ``[from_block, to_block]``."""
        logs = await self._w3.eth.get_logs(
            {
                "fromBlock": from_block,
                "toBlock": to_block,
                "address": to_checksum_address(address),
            }
        )
        logger.debug(
            "Fetched %d logs for %s in [%d, %d]", len(logs), address, from_block, to_block
        )
        return list(logs)

    async def read_contract(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        """Call a view function and return its decoded result.

        Raises whatever web3 raises (reverts, RPC errors, timeouts).
        """
        contract = self._contract(address, abi)
        function = getattr(contract.functions, function_name)
        return await function(*args).call()

    def _contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        checksum = to_checksum_address(address)
        contract = self._contracts.get(checksum)
        if contract is None:
            contract = self._w3.eth.contract(address=checksum, abi=abi)
            self._contracts[checksum] = contract
        return contract

    async def close(self) -> None:
        provider = self._w3.provider
        disconnect = getattr(provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
