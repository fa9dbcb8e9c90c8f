"""SQLite-backed address/position store."""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from ..models import PositionRecord, normalize_address

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS user_addresses (
    user_address TEXT PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS user_positions (
    user_address    TEXT PRIMARY KEY REFERENCES user_addresses(user_address),
    amount_supplied TEXT NOT NULL,   -- uint256 as decimal string
    amount_borrowed TEXT NOT NULL,   -- uint256 as decimal string
    health_factor   REAL NOT NULL,
    read_errors     INTEGER NOT NULL DEFAULT 0,
    updated_block   INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS meta (
    k TEXT PRIMARY KEY,
    v TEXT
);
"""

_CHECKPOINT_KEY = "last_processed_block"


class SqliteStore:
    """Address set, position table and sync checkpoint in one SQLite file.

    Every statement runs in autocommit mode, so each insert/upsert is atomic on
    its own and there is no cross-row transaction.
    """

    def __init__(self, path: str | Path = ":memory:") -> None:
        self.path = str(path)
        self._conn = sqlite3.connect(
            self.path, isolation_level=None, check_same_thread=False
        )
        if self.path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._conn.executescript(_SCHEMA)
        logger.debug("Opened store at %s", self.path)

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Known addresses
    # ------------------------------------------------------------------

    def record_address(self, address: str) -> bool:
        """Insert ``address`` if absent. Returns True when a new row was added."""
        cur = self._conn.execute(
            "INSERT OR IGNORE INTO user_addresses(user_address) VALUES (?)",
            (normalize_address(address),),
        )
        return cur.rowcount == 1

    def list_addresses(self) -> list[str]:
        rows = self._conn.execute(
            "SELECT user_address FROM user_addresses ORDER BY user_address"
        ).fetchall()
        return [row[0] for row in rows]

    def count_addresses(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM user_addresses").fetchone()[0]

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def upsert_position(self, record: PositionRecord) -> None:
        self._conn.execute(
            """
            INSERT INTO user_positions
                (user_address, amount_supplied, amount_borrowed, health_factor,
                 read_errors, updated_block)
            VALUES (?,?,?,?,?,?)
            ON CONFLICT(user_address) DO UPDATE SET
                amount_supplied=excluded.amount_supplied,
                amount_borrowed=excluded.amount_borrowed,
                health_factor=excluded.health_factor,
                read_errors=excluded.read_errors,
                updated_block=excluded.updated_block
            """,
            (
                normalize_address(record.address),
                str(record.amount_supplied),
                str(record.amount_borrowed),
                float(record.health_factor),
                int(record.read_errors),
                int(record.updated_block),
            ),
        )

    def get_position(self, address: str) -> PositionRecord | None:
        row = self._conn.execute(
            """
            SELECT user_address, amount_supplied, amount_borrowed, health_factor,
                   read_errors, updated_block
            FROM user_positions WHERE user_address = ?
            """,
            (normalize_address(address),),
        ).fetchone()
        return _row_to_position(row) if row else None

    def list_positions(self) -> list[PositionRecord]:
        rows = self._conn.execute(
            """
            SELECT user_address, amount_supplied, amount_borrowed, health_factor,
                   read_errors, updated_block
            FROM user_positions ORDER BY user_address
            """
        ).fetchall()
        return [_row_to_position(row) for row in rows]

    # ------------------------------------------------------------------
    # Sync checkpoint
    # ------------------------------------------------------------------

    def get_checkpoint(self) -> int | None:
        row = self._conn.execute(
            "SELECT v FROM meta WHERE k = ?", (_CHECKPOINT_KEY,)
        ).fetchone()
        return int(row[0]) if row else None

    def set_checkpoint(self, block_number: int) -> None:
        self._conn.execute(
            "INSERT INTO meta(k, v) VALUES (?, ?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
            (_CHECKPOINT_KEY, str(block_number)),
        )


def _row_to_position(row: tuple) -> PositionRecord:
    return PositionRecord(
        address=row[0],
        amount_supplied=int(row[1]),
        amount_borrowed=int(row[2]),
        health_factor=float(row[3]),
        read_errors=int(row[4]),
        updated_block=int(row[5]),
    )
