"""EVM chain support"""
from .client import EvmClient
from .decoder import LogDecoder
from .source import LogEventSource

__all__ = ["EvmClient", "LogDecoder", "LogEventSource"]
