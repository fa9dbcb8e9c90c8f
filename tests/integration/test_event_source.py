"""Integration tests for the polling log source."""
from __future__ import annotations

import pytest

from src.chains.evm.source import LogEventSource
from src.models import BlockTick, Mint, Transfer

MTOKEN = "0x628ff693426583D9a7FB391E54366292F509D457"
ADDR_A = "0x" + "a" * 40
ADDR_B = "0x" + "b" * 40


async def _collect(source: LogEventSource, start: int, end: int) -> list:
    return [item async for item in source.stream(start, end)]


class TestWindows:
    def test_splits_range(self, fake_client) -> None:
        source = LogEventSource(fake_client, MTOKEN, max_block_range=4)
        assert source.windows(1, 10) == [(1, 4), (5, 8), (9, 10)]

    def test_single_block(self, fake_client) -> None:
        source = LogEventSource(fake_client, MTOKEN, max_block_range=4)
        assert source.windows(7, 7) == [(7, 7)]

    def test_empty_range(self, fake_client) -> None:
        source = LogEventSource(fake_client, MTOKEN, max_block_range=4)
        assert source.windows(8, 7) == []


class TestStream:
    @pytest.mark.asyncio
    async def test_every_block_gets_a_tick(self, fake_client) -> None:
        source = LogEventSource(fake_client, MTOKEN, max_block_range=2)
        items = await _collect(source, 5, 9)
        assert items == [BlockTick(n) for n in range(5, 10)]
        assert fake_client.log_requests == [(5, 6), (7, 8), (9, 9)]

    @pytest.mark.asyncio
    async def test_events_ordered_by_block_and_log_index(self, fake_client, make_log) -> None:
        fake_client.logs = [
            make_log("Mint", block_number=3, log_index=9, minter=ADDR_B, mintAmount=1, mintTokens=1),
            make_log("Transfer", block_number=2, log_index=1, **{"from": ADDR_A, "to": ADDR_B, "amount": 1}),
            make_log("Mint", block_number=3, log_index=2, minter=ADDR_A, mintAmount=1, mintTokens=1),
        ]
        source = LogEventSource(fake_client, MTOKEN, max_block_range=10)

        items = await _collect(source, 2, 3)

        kinds = [(type(i).__name__, getattr(i, "log_index", None)) for i in items]
        assert kinds == [
            ("Transfer", 1),
            ("BlockTick", None),
            ("Mint", 2),
            ("Mint", 9),
            ("BlockTick", None),
        ]
        assert isinstance(items[0], Transfer)
        assert isinstance(items[2], Mint) and items[2].minter == ADDR_A

    @pytest.mark.asyncio
    async def test_removed_logs_are_ignored(self, fake_client, make_log) -> None:
        log = make_log("Mint", block_number=4, minter=ADDR_A, mintAmount=1, mintTokens=1)
        log["removed"] = True
        fake_client.logs = [log]
        source = LogEventSource(fake_client, MTOKEN)

        assert await _collect(source, 4, 4) == [BlockTick(4)]

    @pytest.mark.asyncio
    async def test_decode_failure_is_logged_and_skipped(
        self, fake_client, make_log, caplog: pytest.LogCaptureFixture
    ) -> None:
        bad = make_log("Mint", block_number=4, log_index=0, minter=ADDR_A, mintAmount=1, mintTokens=1)
        bad["data"] = b"\x00"
        good = make_log("Mint", block_number=4, log_index=1, minter=ADDR_B, mintAmount=1, mintTokens=1)
        fake_client.logs = [bad, good]
        source = LogEventSource(fake_client, MTOKEN)

        with caplog.at_level("ERROR"):
            items = await _collect(source, 4, 4)

        assert [type(i).__name__ for i in items] == ["Mint", "BlockTick"]
        assert items[0].minter == ADDR_B
        assert "Failed to decode log 0 at block 4" in caplog.text
