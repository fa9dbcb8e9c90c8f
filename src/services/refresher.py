"""Periodic re-read of supply/borrow positions for known addresses."""
from __future__ import annotations

import logging
from typing import Any

from eth_utils import to_checksum_address

from ..chains.evm.abi import MTOKEN_VIEWS_ABI
from ..interfaces.chain import ChainClient
from ..interfaces.store import AddressStore, PositionStore
from ..models import PositionRecord

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_BLOCKS = 10

# Health factor reported for accounts without debt
HEALTH_FACTOR_NO_DEBT = 999999.0

SUPPLY_FUNCTION = "balanceOf"
BORROW_FUNCTION = "borrowBalanceStored"


def is_refresh_block(block_number: int) -> bool:
    return block_number % REFRESH_INTERVAL_BLOCKS == 0


def compute_health_factor(amount_supplied: int, amount_borrowed: int) -> float:
    """supply / borrow as a float, or the no-debt sentinel when nothing is borrowed."""
    if amount_borrowed == 0:
        return HEALTH_FACTOR_NO_DEBT
    return float(amount_supplied) / float(amount_borrowed)


class PositionRefresher:
    """Recomputes one ``PositionRecord`` per known address every N blocks."""

    def __init__(
        self,
        client: ChainClient,
        addresses: AddressStore,
        positions: PositionStore,
        mtoken_address: str,
        abi: list[dict[str, Any]] | None = None,
    ) -> None:
        self._client = client
        self._addresses = addresses
        self._positions = positions
        self._mtoken = mtoken_address
        self._abi = abi if abi is not None else MTOKEN_VIEWS_ABI

    async def handle_block(self, block_number: int) -> int | None:
        """Run a refresh cycle on cadence blocks; other blocks are no-ops."""
        if not is_refresh_block(block_number):
            return None
        return await self.refresh_all(block_number)

    async def refresh_all(self, block_number: int) -> int:
        """Refresh every known address. Store errors propagate."""
        logger.info("Block %d: Updating user positions...", block_number)

        # TODO: page through user_addresses once the set outgrows one cycle per block interval
        addresses = self._addresses.list_addresses()
        for address in addresses:
            record = await self.refresh_address(address, block_number)
            self._positions.upsert_position(record)

        logger.info(
            "Block %d: Finished updating positions for %d addresses.",
            block_number,
            len(addresses),
        )
        return len(addresses)

    async def refresh_address(self, address: str, block_number: int = 0) -> PositionRecord:
        """Read both metrics for ``address``; a failed read counts as zero."""
        read_errors = 0

        amount_supplied = await self._read_uint(SUPPLY_FUNCTION, address)
        if amount_supplied is None:
            read_errors += 1
            amount_supplied = 0

        amount_borrowed = await self._read_uint(BORROW_FUNCTION, address)
        if amount_borrowed is None:
            read_errors += 1
            amount_borrowed = 0

        return PositionRecord(
            address=address,
            amount_supplied=amount_supplied,
            amount_borrowed=amount_borrowed,
            health_factor=compute_health_factor(amount_supplied, amount_borrowed),
            read_errors=read_errors,
            updated_block=block_number,
        )

    async def _read_uint(self, function_name: str, address: str) -> int | None:
        try:
            value = await self._client.read_contract(
                self._mtoken,
                self._abi,
                function_name,
                [to_checksum_address(address)],
            )
            return int(value)
        except Exception as e:
            logger.warning("%s(%s) failed: %s", function_name, address, e)
            return None
