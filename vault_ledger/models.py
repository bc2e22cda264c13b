"""Ledger records — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Strategy:
    """A yield source that vaults can be routed to."""

    id: int
    name: str
    protocol: str
    apy: int
    tvl_capacity: int
    current_tvl: int
    risk_score: int
    is_active: bool
    contract_address: str
    last_updated: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Vault:
    """Pooled deposits of one asset, routed to a single strategy."""

    id: int
    name: str
    asset: str
    total_shares: int
    total_assets: int
    strategy_id: int
    risk_level: int
    min_deposit: int
    is_active: bool
    created_at: int
    last_harvest: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UserPosition:
    """A user's share holding in one vault."""

    shares: int
    deposited_at: int
    last_compound: int
    total_deposited: int
    total_withdrawn: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlatformStats:
    """Snapshot of the platform-wide counters and flags."""

    total_value_locked: int
    total_vaults: int
    total_strategies: int
    platform_fee_rate: int
    emergency_pause: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
