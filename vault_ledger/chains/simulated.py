"""In-memory chain: block clock plus per-principal asset balances."""
from __future__ import annotations

import logging
import threading

from ..errors import TransferError

logger = logging.getLogger(__name__)


class SimulatedChain:
    """Stand-in host chain used by the CLI server and the tests.

    The block height only moves through ``mine_blocks``. With
    ``mint_on_demand`` a sender short of funds is topped up first, which keeps
    demo servers usable without seeding balances.
    """

    def __init__(
        self,
        balances: dict[str, int] | None = None,
        start_height: int = 1,
        mint_on_demand: bool = False,
    ) -> None:
        self._balances: dict[str, int] = dict(balances or {})
        self._height = start_height
        self._mint_on_demand = mint_on_demand
        self._lock = threading.RLock()

    @property
    def block_height(self) -> int:
        with self._lock:
            return self._height

    def mine_blocks(self, count: int = 1) -> int:
        """Advance the block height; returns the new height."""
        if count < 0:
            raise ValueError("Cannot mine a negative number of blocks")
        with self._lock:
            self._height += count
            logger.debug("Mined %d blocks, height now %d", count, self._height)
            return self._height

    def balance_of(self, principal: str) -> int:
        with self._lock:
            return self._balances.get(principal, 0)

    def credit(self, principal: str, amount: int) -> None:
        """Mint ``amount`` directly into ``principal``'s balance."""
        if amount < 0:
            raise ValueError("Cannot credit a negative amount")
        with self._lock:
            self._balances[principal] = self._balances.get(principal, 0) + amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        self.transfer_many(sender, [(recipient, amount)])

    def transfer_many(self, sender: str, payouts: list[tuple[str, int]]) -> None:
        """Apply every ``(recipient, amount)`` leg from ``sender``, or none."""
        for recipient, amount in payouts:
            if amount <= 0:
                raise TransferError(f"Transfer amount must be positive, got {amount}")
            if sender == recipient:
                raise TransferError("Sender and recipient are the same principal")
        total = sum(amount for _, amount in payouts)

        with self._lock:
            available = self._balances.get(sender, 0)
            if available < total:
                if not self._mint_on_demand:
                    raise TransferError(
                        f"Insufficient balance for {sender}: {available} < {total}"
                    )
                available = total
            self._balances[sender] = available - total
            for recipient, amount in payouts:
                self._balances[recipient] = self._balances.get(recipient, 0) + amount

        for recipient, amount in payouts:
            logger.debug("Transferred %d from %s to %s", amount, sender, recipient)
