"""Decode raw MToken logs into typed event objects."""
from __future__ import annotations

import logging
from typing import Any, Callable

from eth_abi import decode as abi_decode
from eth_utils import keccak
from hexbytes import HexBytes

from ...models import (
    Approval,
    Borrow,
    LiquidateBorrow,
    Mint,
    MTokenEvent,
    Redeem,
    RepayBorrow,
    Transfer,
    normalize_address,
)
from .abi import MTOKEN_EVENTS_ABI

logger = logging.getLogger(__name__)


def event_signature(event_abi: dict[str, Any]) -> str:
    """``Name(type1,type2,...)`` as hashed into topic0."""
    types = ",".join(i["type"] for i in event_abi["inputs"])
    return f"{event_abi['name']}({types})"


def event_topic(event_abi: dict[str, Any]) -> bytes:
    return keccak(text=event_signature(event_abi))


def _as_bytes(value: Any) -> bytes:
    return bytes(HexBytes(value))


# Decoded ABI args (camelCase names, addresses already normalized) -> model
_BUILDERS: dict[str, Callable[..., MTokenEvent]] = {
    "Borrow": lambda a, **m: Borrow(
        borrower=a["borrower"],
        borrow_amount=a["borrowAmount"],
        account_borrows=a["accountBorrows"],
        total_borrows=a["totalBorrows"],
        **m,
    ),
    "RepayBorrow": lambda a, **m: RepayBorrow(
        payer=a["payer"],
        borrower=a["borrower"],
        repay_amount=a["repayAmount"],
        account_borrows=a["accountBorrows"],
        total_borrows=a["totalBorrows"],
        **m,
    ),
    "Mint": lambda a, **m: Mint(
        minter=a["minter"],
        mint_amount=a["mintAmount"],
        mint_tokens=a["mintTokens"],
        **m,
    ),
    "Redeem": lambda a, **m: Redeem(
        redeemer=a["redeemer"],
        redeem_amount=a["redeemAmount"],
        redeem_tokens=a["redeemTokens"],
        **m,
    ),
    "LiquidateBorrow": lambda a, **m: LiquidateBorrow(
        liquidator=a["liquidator"],
        borrower=a["borrower"],
        repay_amount=a["repayAmount"],
        mtoken_collateral=a["mTokenCollateral"],
        seize_tokens=a["seizeTokens"],
        **m,
    ),
    "Transfer": lambda a, **m: Transfer(
        sender=a["from"], receiver=a["to"], amount=a["amount"], **m
    ),
    "Approval": lambda a, **m: Approval(
        owner=a["owner"], spender=a["spender"], amount=a["amount"], **m
    ),
}


class LogDecoder:
    """Maps topic0 to the tracked MToken events and decodes their payloads."""

    def __init__(self, events_abi: list[dict[str, Any]] | None = None) -> None:
        abis = events_abi if events_abi is not None else MTOKEN_EVENTS_ABI
        self._by_topic: dict[bytes, dict[str, Any]] = {
            event_topic(abi): abi for abi in abis if abi["name"] in _BUILDERS
        }

    def decode(self, log: dict[str, Any]) -> MTokenEvent | None:
        """Return the typed event for ``log``, or None if it is not tracked.

        Raises ``ValueError`` (or an eth_abi decoding error) for a tracked
        topic whose payload does not match the ABI.
        """
        topics = [_as_bytes(t) for t in log.get("topics", [])]
        if not topics:
            return None

        event_abi = self._by_topic.get(topics[0])
        if event_abi is None:
            logger.debug("Skipping untracked topic %s", topics[0].hex())
            return None

        inputs = event_abi["inputs"]
        indexed = [i for i in inputs if i["indexed"]]
        plain = [i for i in inputs if not i["indexed"]]

        if len(topics) != len(indexed) + 1:
            raise ValueError(
                f"{event_abi['name']}: expected {len(indexed) + 1} topics, got {len(topics)}"
            )

        args: dict[str, Any] = {}
        for inp, topic in zip(indexed, topics[1:]):
            args[inp["name"]] = abi_decode([inp["type"]], topic)[0]

        values = abi_decode([i["type"] for i in plain], _as_bytes(log.get("data", b"")))
        for inp, value in zip(plain, values):
            args[inp["name"]] = value

        for inp in inputs:
            if inp["type"] == "address":
                args[inp["name"]] = normalize_address(args[inp["name"]])

        return _BUILDERS[event_abi["name"]](
            args,
            block_number=int(log.get("blockNumber", 0)),
            log_index=int(log.get("logIndex", 0)),
        )
