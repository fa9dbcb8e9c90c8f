"""Records every participant seen in MToken events."""
from __future__ import annotations

import logging

from ..interfaces.store import AddressStore
from ..models import (
    Approval,
    Borrow,
    LiquidateBorrow,
    Mint,
    MTokenEvent,
    Redeem,
    RepayBorrow,
    Transfer,
)

logger = logging.getLogger(__name__)


def extract_addresses(event: MTokenEvent) -> tuple[str, ...]:
    """Addresses embedded in ``event``, in recording order."""
    if isinstance(event, Borrow):
        return (event.borrower,)
    if isinstance(event, RepayBorrow):
        # The payer might also be a user
        if event.payer != event.borrower:
            return (event.borrower, event.payer)
        return (event.borrower,)
    if isinstance(event, Mint):
        return (event.minter,)
    if isinstance(event, Redeem):
        return (event.redeemer,)
    if isinstance(event, LiquidateBorrow):
        return (event.liquidator, event.borrower)
    if isinstance(event, Transfer):
        return (event.sender, event.receiver)
    if isinstance(event, Approval):
        return (event.owner, event.spender)
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


class AddressCollector:
    """Maintains the known-address set from the tracked event kinds."""

    def __init__(self, store: AddressStore) -> None:
        self._store = store

    def record_address(self, address: str) -> bool:
        """Insert-if-absent; safe to call any number of times."""
        added = self._store.record_address(address)
        if added:
            logger.debug("New address %s", address)
        return added

    async def handle_event(self, event: MTokenEvent) -> int:
        """Record the addresses of one event and return how many were new.

        Failures are logged and swallowed so the stream keeps flowing.
        """
        try:
            added = 0
            for address in extract_addresses(event):
                if self.record_address(address):
                    added += 1
            return added
        except Exception:
            logger.exception("Error in %s handler", type(event).__name__)
            return 0
