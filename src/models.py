"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from eth_utils import is_hex_address


def normalize_address(address: str) -> str:
    """Return the canonical ``0x``-prefixed lowercase form of a 20-byte address."""
    if not isinstance(address, str) or not is_hex_address(address):
        raise ValueError(f"Not a 20-byte hex address: {address!r}")
    return "0x" + address[-40:].lower()


# ---------------------------------------------------------------------------
# MToken events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Borrow:
    borrower: str
    borrow_amount: int
    account_borrows: int
    total_borrows: int
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class RepayBorrow:
    payer: str
    borrower: str
    repay_amount: int
    account_borrows: int
    total_borrows: int
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class Mint:
    """Supply of the underlying in exchange for mTokens."""

    minter: str
    mint_amount: int
    mint_tokens: int
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class Redeem:
    """Withdrawal of the underlying by burning mTokens."""

    redeemer: str
    redeem_amount: int
    redeem_tokens: int
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class LiquidateBorrow:
    liquidator: str
    borrower: str
    repay_amount: int
    mtoken_collateral: str
    seize_tokens: int
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class Transfer:
    # ``from`` / ``to`` in the ABI
    sender: str
    receiver: str
    amount: int
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class Approval:
    owner: str
    spender: str
    amount: int
    block_number: int = 0
    log_index: int = 0


MTokenEvent = Union[Borrow, RepayBorrow, Mint, Redeem, LiquidateBorrow, Transfer, Approval]


@dataclass(frozen=True)
class BlockTick:
    """Marks that every event of block ``number`` has been delivered."""

    number: int


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PositionRecord:
    """Latest supply/borrow snapshot for one address."""

    address: str
    amount_supplied: int
    amount_borrowed: int
    health_factor: float
    read_errors: int = 0
    updated_block: int = 0
