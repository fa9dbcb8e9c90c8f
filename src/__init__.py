"""MToken position indexer."""
