#!/usr/bin/env python3
"""
MToken Position Indexer
Entry point for ``python -m src.main``
"""
from .cli import main


if __name__ == "__main__":
    main()
