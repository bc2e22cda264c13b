"""State containers written only by the ledger engine."""
from .platform import PlatformConfig
from .strategies import StrategyRegistry
from .vaults import VaultRegistry

__all__ = ["PlatformConfig", "StrategyRegistry", "VaultRegistry"]
