"""Unit tests for the platform, strategy and vault registries."""
from __future__ import annotations

from dataclasses import replace

from vault_ledger.config import DEFAULT_STRATEGIES, StrategySeed
from vault_ledger.models import UserPosition, Vault
from vault_ledger.registry import PlatformConfig, StrategyRegistry, VaultRegistry


class TestPlatformConfig:
    def test_owner_is_admin(self) -> None:
        cfg = PlatformConfig(owner="deployer", treasury="treasury")
        assert cfg.is_admin("deployer")
        assert not cfg.is_admin("wallet_1")

    def test_added_admin(self) -> None:
        cfg = PlatformConfig(owner="deployer", treasury="t", admins=frozenset({"wallet_1"}))
        assert cfg.is_admin("wallet_1")

    def test_stats_snapshot(self) -> None:
        cfg = PlatformConfig(
            owner="deployer", treasury="t", total_strategies=3, total_value_locked=42
        )
        stats = cfg.stats()
        assert stats.total_strategies == 3
        assert stats.total_value_locked == 42
        assert stats.platform_fee_rate == 50
        assert stats.emergency_pause is False


class TestStrategyRegistry:
    def test_bootstrap_assigns_ids_from_one(self) -> None:
        registry = StrategyRegistry.bootstrap(DEFAULT_STRATEGIES, "deployer", 7)
        assert len(registry) == 3
        assert [s.id for s in registry.all()] == [1, 2, 3]
        first = registry.get(1)
        assert first is not None
        assert first.name == "STX-Staking-Strategy"
        assert first.current_tvl == 0
        assert first.is_active is True
        assert first.contract_address == "deployer"
        assert first.last_updated == 7

    def test_missing_strategy(self) -> None:
        registry = StrategyRegistry.bootstrap(DEFAULT_STRATEGIES, "deployer", 1)
        assert registry.get(99) is None
        assert 99 not in registry
        assert 2 in registry

    def test_best_apy(self) -> None:
        registry = StrategyRegistry.bootstrap(DEFAULT_STRATEGIES, "deployer", 1)
        assert registry.best_apy() == 1500

    def test_best_apy_sees_updates(self) -> None:
        registry = StrategyRegistry.bootstrap(DEFAULT_STRATEGIES, "deployer", 1)
        strategy = registry.get(2)
        assert strategy is not None
        registry.put(replace(strategy, apy=2500))
        assert registry.best_apy() == 2500

    def test_best_apy_empty_registry(self) -> None:
        assert StrategyRegistry.bootstrap((), "deployer", 1).best_apy() == 0

    def test_all_sorted_by_id(self) -> None:
        seeds = (
            StrategySeed("a", "p", 100, 1, 1),
            StrategySeed("b", "p", 100, 1, 1),
        )
        registry = StrategyRegistry.bootstrap(seeds, "deployer", 1)
        first = registry.get(1)
        assert first is not None
        registry.put(replace(first, name="a2"))
        assert [s.name for s in registry.all()] == ["a2", "b"]


def _vault(vault_id: int) -> Vault:
    return Vault(
        id=vault_id,
        name=f"Vault {vault_id}",
        asset="deployer.stx-token",
        total_shares=0,
        total_assets=0,
        strategy_id=1,
        risk_level=2,
        min_deposit=0,
        is_active=True,
        created_at=1,
        last_harvest=1,
    )


class TestVaultRegistry:
    def test_put_and_get_vault(self) -> None:
        registry = VaultRegistry()
        registry.put_vault(_vault(1))
        vault = registry.get_vault(1)
        assert vault is not None
        assert vault.name == "Vault 1"
        assert registry.get_vault(2) is None

    def test_positions_keyed_by_vault_and_user(self) -> None:
        registry = VaultRegistry()
        position = UserPosition(shares=10, deposited_at=1, last_compound=1, total_deposited=10)
        registry.put_position(1, "wallet_1", position)
        assert registry.get_position(1, "wallet_1") == position
        assert registry.get_position(1, "wallet_2") is None
        assert registry.get_position(2, "wallet_1") is None

    def test_delete_position(self) -> None:
        registry = VaultRegistry()
        position = UserPosition(shares=10, deposited_at=1, last_compound=1, total_deposited=10)
        registry.put_position(1, "wallet_1", position)
        registry.delete_position(1, "wallet_1")
        assert registry.get_position(1, "wallet_1") is None

    def test_user_vaults_no_duplicates(self) -> None:
        registry = VaultRegistry()
        registry.add_user_vault("wallet_1", 3)
        registry.add_user_vault("wallet_1", 1)
        registry.add_user_vault("wallet_1", 3)
        assert registry.user_vaults("wallet_1") == [3, 1]

    def test_user_vaults_unknown_user(self) -> None:
        assert VaultRegistry().user_vaults("nobody") == []

    def test_user_vaults_returns_copy(self) -> None:
        registry = VaultRegistry()
        registry.add_user_vault("wallet_1", 1)
        registry.user_vaults("wallet_1").append(99)
        assert registry.user_vaults("wallet_1") == [1]
