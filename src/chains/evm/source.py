"""Polling event source: eth_getLogs windows turned into an ordered stream."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, AsyncIterator, Union

from ...interfaces.chain import ChainClient
from ...models import BlockTick, MTokenEvent
from .decoder import LogDecoder

logger = logging.getLogger(__name__)

StreamItem = Union[MTokenEvent, BlockTick]


class LogEventSource:
    """Yields decoded MToken events followed by one tick per block.

    Every block in the requested range produces a ``BlockTick``, including
    blocks without any MToken logs.
    """

    def __init__(
        self,
        client: ChainClient,
        contract_address: str,
        max_block_range: int = 500,
        decoder: LogDecoder | None = None,
    ) -> None:
        self._client = client
        self._address = contract_address
        self._max_block_range = max(1, max_block_range)
        self._decoder = decoder or LogDecoder()

    def windows(self, from_block: int, to_block: int) -> list[tuple[int, int]]:
        """Split ``[from_block, to_block]`` into eth_getLogs-sized windows."""
        out: list[tuple[int, int]] = []
        current = from_block
        while current <= to_block:
            end = min(current + self._max_block_range - 1, to_block)
            out.append((current, end))
            current = end + 1
        return out

    async def stream(self, from_block: int, to_block: int) -> AsyncIterator[StreamItem]:
        for start, end in self.windows(from_block, to_block):
            logs = await self._client.get_logs(self._address, start, end)
            by_block = self._group_by_block(logs)

            for number in range(start, end + 1):
                for log in by_block.get(number, []):
                    event = self._decode(log)
                    if event is not None:
                        yield event
                yield BlockTick(number=number)

    def _decode(self, log: dict[str, Any]) -> MTokenEvent | None:
        try:
            return self._decoder.decode(log)
        except Exception:
            logger.exception(
                "Failed to decode log %s at block %s",
                log.get("logIndex"),
                log.get("blockNumber"),
            )
            return None

    @staticmethod
    def _group_by_block(logs: list[dict[str, Any]]) -> dict[int, list[dict[str, Any]]]:
        grouped: dict[int, list[dict[str, Any]]] = defaultdict(list)
        for log in logs:
            if log.get("removed"):
                continue
            grouped[int(log["blockNumber"])].append(log)
        for entries in grouped.values():
            entries.sort(key=lambda lg: int(lg.get("logIndex", 0)))
        return grouped
