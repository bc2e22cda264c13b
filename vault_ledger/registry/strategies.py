"""Strategy registry: strategy-id -> Strategy."""
from __future__ import annotations

from collections.abc import Iterable

from ..config import StrategySeed
from ..models import Strategy


class StrategyRegistry:
    """Holds every registered strategy. Strategies are never removed."""

    def __init__(self) -> None:
        self._strategies: dict[int, Strategy] = {}

    @classmethod
    def bootstrap(
        cls, seeds: Iterable[StrategySeed], contract_address: str, height: int
    ) -> StrategyRegistry:
        """Build a registry pre-populated with the genesis strategies (ids from 1)."""
        registry = cls()
        for strategy_id, seed in enumerate(seeds, start=1):
            registry.put(
                Strategy(
                    id=strategy_id,
                    name=seed.name,
                    protocol=seed.protocol,
                    apy=seed.apy,
                    tvl_capacity=seed.tvl_capacity,
                    current_tvl=0,
                    risk_score=seed.risk_score,
                    is_active=True,
                    contract_address=contract_address,
                    last_updated=height,
                )
            )
        return registry

    def __len__(self) -> int:
        return len(self._strategies)

    def __contains__(self, strategy_id: object) -> bool:
        return strategy_id in self._strategies

    def get(self, strategy_id: int) -> Strategy | None:
        return self._strategies.get(strategy_id)

    def all(self) -> list[Strategy]:
        """All strategies in ascending id order."""
        return [self._strategies[k] for k in sorted(self._strategies)]

    def put(self, strategy: Strategy) -> None:
        self._strategies[strategy.id] = strategy

    def best_apy(self) -> int:
        # Strict comparison keeps the lowest id on ties.
        best = 0
        for strategy in self.all():
            if strategy.apy > best:
                best = strategy.apy
        return best
