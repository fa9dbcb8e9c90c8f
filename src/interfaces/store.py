"""Store protocols for the durable address and position tables."""
from typing import Protocol

from ..models import PositionRecord


class AddressStore(Protocol):
    """Monotonically growing set of known addresses."""

    def record_address(self, address: str) -> bool: ...

    def list_addresses(self) -> list[str]: ...


class PositionStore(Protocol):
    """One position record per address, last write wins."""

    def upsert_position(self, record: PositionRecord) -> None: ...

    def get_position(self, address: str) -> PositionRecord | None: ...

    def list_positions(self) -> list[PositionRecord]: ...
