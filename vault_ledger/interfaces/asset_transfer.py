"""Asset transfer protocol — fungible-asset movement abstraction."""
from typing import Protocol


class AssetTransfer(Protocol):
    """Moves ``amount`` units of the vault asset between two principals.

    Implementations raise ``TransferError`` and move nothing when the
    transfer cannot be applied in full.
    """

    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def transfer_many(self, sender: str, payouts: list[tuple[str, int]]) -> None:
        """Move each ``(recipient, amount)`` leg from ``sender`` atomically."""
        ...
