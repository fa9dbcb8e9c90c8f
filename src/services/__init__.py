"""Service modules"""
from .collector import AddressCollector
from .indexer import Indexer
from .refresher import PositionRefresher

__all__ = ["AddressCollector", "Indexer", "PositionRefresher"]
