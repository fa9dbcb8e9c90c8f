"""Persistent storage backends"""
from .sqlite import SqliteStore

__all__ = ["SqliteStore"]
