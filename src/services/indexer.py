"""Pipeline orchestration: feeds the event stream to collector and refresher."""
from __future__ import annotations

import asyncio
import logging
from typing import Union

from ..chains.evm import EvmClient, LogEventSource
from ..config import AppConfig
from ..interfaces.event_source import EventSource
from ..models import BlockTick, MTokenEvent
from ..store import SqliteStore
from .collector import AddressCollector
from .refresher import PositionRefresher

logger = logging.getLogger(__name__)

_ERROR_BACKOFF_SECONDS = 10


class Indexer:
    """Owns the chain client and store and drives both pipeline components."""

    def __init__(
        self,
        config: AppConfig,
        client: EvmClient | None = None,
        store: SqliteStore | None = None,
        source: EventSource | None = None,
    ) -> None:
        self._config = config
        self._client = client or EvmClient(config.chain)
        self._store = store or SqliteStore(config.database.path)
        self._source = source or LogEventSource(
            self._client,
            config.contracts.mtoken,
            max_block_range=config.indexer.max_block_range,
        )

        self.collector = AddressCollector(self._store)
        self.refresher = PositionRefresher(
            self._client, self._store, self._store, config.contracts.mtoken
        )

    @property
    def store(self) -> SqliteStore:
        return self._store

    # ------------------------------------------------------------------
    # Block range helpers
    # ------------------------------------------------------------------

    async def safe_head(self) -> int:
        head = await self._client.get_block_number()
        return max(0, head - self._config.indexer.confirmations)

    def next_block(self) -> int:
        """First block not yet processed."""
        checkpoint = self._store.get_checkpoint()
        start = self._config.contracts.start_block
        if checkpoint is None:
            return start
        return max(start, checkpoint + 1)

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def dispatch(self, item: Union[MTokenEvent, BlockTick]) -> None:
        """Deliver one stream item to the component that handles it."""
        if isinstance(item, BlockTick):
            await self.refresher.handle_block(item.number)
            self._store.set_checkpoint(item.number)
        else:
            await self.collector.handle_event(item)

    async def sync(self, to_block: int | None = None) -> int | None:
        """Process every block from the checkpoint up to ``to_block``.

        ``to_block`` defaults to the safe head. Returns the last processed
        block, or None when there was nothing to do.
        """
        target = await self.safe_head()
        if to_block is not None:
            target = min(target, to_block)

        start = self.next_block()
        if start > target:
            logger.debug("Up to date at block %d", start - 1)
            return None

        logger.info("Syncing blocks %d → %d", start, target)
        async for item in self._source.stream(start, target):
            await self.dispatch(item)
        logger.info(
            "Synced to block %d (%d known addresses)",
            target,
            self._store.count_addresses(),
        )
        return target

    async def refresh_now(self) -> int:
        """Run one refresh cycle at the current head, ignoring the cadence."""
        head = await self._client.get_block_number()
        return await self.refresher.refresh_all(head)

    async def run_continuous(self, poll_interval_seconds: float | None = None) -> None:
        """Follow the chain head forever."""
        interval = poll_interval_seconds or self._config.indexer.poll_interval_seconds
        logger.info(
            "Starting continuous indexing of %s (polling every %s seconds)",
            self._config.contracts.mtoken,
            interval,
        )

        while True:
            try:
                await self.sync()
                await asyncio.sleep(interval)
            except Exception as e:
                logger.error("Error in indexing loop: %s", e)
                await asyncio.sleep(_ERROR_BACKOFF_SECONDS)

    async def close(self) -> None:
        await self._client.close()
        self._store.close()
