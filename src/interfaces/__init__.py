"""Protocol interfaces for the MToken position indexer."""
from .chain import ChainClient
from .event_source import EventSource
from .store import AddressStore, PositionStore

__all__ = ["AddressStore", "ChainClient", "EventSource", "PositionStore"]
