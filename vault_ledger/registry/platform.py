"""Platform-wide configuration record."""
from __future__ import annotations

from dataclasses import dataclass

from ..models import PlatformStats


@dataclass(frozen=True)
class PlatformConfig:
    """Singleton platform state; replaced wholesale on every change."""

    owner: str
    treasury: str
    admins: frozenset[str] = frozenset()
    platform_fee_rate: int = 50
    emergency_pause: bool = False
    total_vaults: int = 0
    total_strategies: int = 0
    total_value_locked: int = 0

    def is_admin(self, principal: str) -> bool:
        return principal == self.owner or principal in self.admins

    def stats(self) -> PlatformStats:
        return PlatformStats(
            total_value_locked=self.total_value_locked,
            total_vaults=self.total_vaults,
            total_strategies=self.total_strategies,
            platform_fee_rate=self.platform_fee_rate,
            emergency_pause=self.emergency_pause,
        )
