"""Event source protocol — ordered stream of contract events and block ticks."""
from typing import AsyncIterator, Protocol, Union

from ..models import BlockTick, MTokenEvent


class EventSource(Protocol):
    """Delivers events in (block, log index) order, each block closed by a tick."""

    def stream(
        self, from_block: int, to_block: int
    ) -> AsyncIterator[Union[MTokenEvent, BlockTick]]: ...
