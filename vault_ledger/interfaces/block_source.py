"""Block source protocol — the host's notion of time."""
from typing import Protocol


class BlockSource(Protocol):
    """Supplies the current block height."""

    @property
    def block_height(self) -> int: ...
