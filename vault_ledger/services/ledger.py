"""Ledger engine — the single writer for platform, strategy and vault state."""
from __future__ import annotations

import functools
import logging
import threading
from dataclasses import replace
from typing import Any, Callable, TypeVar

from ..config import MAX_PLATFORM_FEE_RATE, AppConfig
from ..errors import ErrorCode, LedgerError, Result, TransferError
from ..interfaces.asset_transfer import AssetTransfer
from ..interfaces.block_source import BlockSource
from ..models import PlatformStats, Strategy, UserPosition, Vault
from ..registry import PlatformConfig, StrategyRegistry, VaultRegistry
from .share_math import accrued_yield, assets_for_shares, fee_for, shares_for_deposit

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Vault risk level -> strategy id assigned at creation. Deliberately a fixed
# table rather than a lookup by strategy risk score.
RISK_LEVEL_STRATEGY: dict[int, int] = {1: 2, 2: 1, 3: 1}

MAX_RISK_SCORE = 10


def _operation(func: Callable[..., T]) -> Callable[..., Result[T]]:
    """Run a mutating operation under the engine lock and wrap its outcome.

    The wrapped method raises ``LedgerError`` from its validation phase; that
    (and a failed asset transfer) becomes an error ``Result``. Methods only
    write state after all checks and transfers have succeeded.
    """

    @functools.wraps(func)
    def wrapper(self: LedgerEngine, caller: str, *args: Any, **kwargs: Any) -> Result[T]:
        with self._lock:
            try:
                value = func(self, caller, *args, **kwargs)
            except LedgerError as e:
                logger.warning(
                    "%s by %s rejected: %s (%d)", func.__name__, caller, e.code.name, e.code
                )
                return Result.err(e.code)
            except TransferError as e:
                logger.warning("%s by %s: asset transfer failed: %s", func.__name__, caller, e)
                return Result.err(ErrorCode.TRANSFER_FAILED)
        return Result.ok(value)

    return wrapper


class LedgerEngine:
    """Operation surface for the vault ledger.

    Every mutating method takes the calling principal first and returns a
    ``Result``. Read-only accessors never fail; missing records come back as
    ``None`` (or an empty list / zero).
    """

    def __init__(
        self,
        config: AppConfig,
        chain: BlockSource,
        transfers: AssetTransfer | None = None,
    ) -> None:
        self._chain = chain
        self._transfers: AssetTransfer = transfers if transfers is not None else chain  # type: ignore[assignment]
        self._lock = threading.RLock()

        ledger_cfg = config.ledger
        self._blocks_per_year = ledger_cfg.blocks_per_year
        self._asset = ledger_cfg.asset_reference
        self._custody = ledger_cfg.custody_account

        self._strategies = StrategyRegistry.bootstrap(
            config.strategies, ledger_cfg.owner, chain.block_height
        )
        self._vaults = VaultRegistry()
        self._platform = PlatformConfig(
            owner=ledger_cfg.owner,
            treasury=ledger_cfg.treasury_account,
            platform_fee_rate=ledger_cfg.platform_fee_rate,
            total_strategies=len(self._strategies),
        )
        logger.info(
            "Ledger initialised: owner=%s, %d bootstrap strategies, fee=%dbp",
            ledger_cfg.owner,
            len(self._strategies),
            ledger_cfg.platform_fee_rate,
        )

    @property
    def custody_account(self) -> str:
        return self._custody

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _require_admin(self, caller: str) -> None:
        if not self._platform.is_admin(caller):
            raise LedgerError(ErrorCode.NOT_AUTHORIZED)

    def _require_not_paused(self) -> None:
        if self._platform.emergency_pause:
            raise LedgerError(ErrorCode.VAULT_PAUSED)

    def _require_vault(self, vault_id: int) -> Vault:
        vault = self._vaults.get_vault(vault_id)
        if vault is None:
            raise LedgerError(ErrorCode.VAULT_NOT_FOUND)
        return vault

    def _require_active_vault(self, vault_id: int) -> Vault:
        vault = self._require_vault(vault_id)
        if not vault.is_active:
            raise LedgerError(ErrorCode.VAULT_PAUSED)
        return vault

    def _require_strategy(self, strategy_id: int) -> Strategy:
        strategy = self._strategies.get(strategy_id)
        if strategy is None:
            raise LedgerError(ErrorCode.STRATEGY_NOT_FOUND)
        return strategy

    # ------------------------------------------------------------------
    # Platform administration
    # ------------------------------------------------------------------

    @_operation
    def add_admin(self, caller: str, principal: str) -> bool:
        if caller != self._platform.owner:
            raise LedgerError(ErrorCode.NOT_AUTHORIZED)

        self._platform = replace(self._platform, admins=self._platform.admins | {principal})
        logger.info("Admin added: %s", principal)
        return True

    @_operation
    def toggle_emergency_pause(self, caller: str) -> bool:
        self._require_admin(caller)

        paused = not self._platform.emergency_pause
        self._platform = replace(self._platform, emergency_pause=paused)
        logger.info("Emergency pause %s by %s", "ENABLED" if paused else "disabled", caller)
        return paused

    @_operation
    def set_platform_fee(self, caller: str, rate: int) -> int:
        self._require_admin(caller)
        if not 0 <= rate <= MAX_PLATFORM_FEE_RATE:
            raise LedgerError(ErrorCode.INVALID_AMOUNT)

        self._platform = replace(self._platform, platform_fee_rate=rate)
        logger.info("Platform fee set to %dbp", rate)
        return rate

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    @_operation
    def add_strategy(
        self,
        caller: str,
        name: str,
        protocol: str,
        apy: int,
        tvl_capacity: int,
        risk_score: int,
        contract_address: str,
    ) -> int:
        self._require_admin(caller)
        if apy < 0 or tvl_capacity < 0 or not 1 <= risk_score <= MAX_RISK_SCORE:
            raise LedgerError(ErrorCode.INVALID_AMOUNT)

        strategy_id = self._platform.total_strategies + 1
        self._strategies.put(
            Strategy(
                id=strategy_id,
                name=name,
                protocol=protocol,
                apy=apy,
                tvl_capacity=tvl_capacity,
                current_tvl=0,
                risk_score=risk_score,
                is_active=True,
                contract_address=contract_address,
                last_updated=self._chain.block_height,
            )
        )
        self._platform = replace(self._platform, total_strategies=strategy_id)
        logger.info("Strategy %d added: %s (%s) apy=%dbp", strategy_id, name, protocol, apy)
        return strategy_id

    @_operation
    def update_strategy_apy(self, caller: str, strategy_id: int, apy: int) -> int:
        self._require_admin(caller)
        strategy = self._require_strategy(strategy_id)
        if apy < 0:
            raise LedgerError(ErrorCode.INVALID_AMOUNT)

        self._strategies.put(replace(strategy, apy=apy, last_updated=self._chain.block_height))
        logger.info("Strategy %d apy %dbp -> %dbp", strategy_id, strategy.apy, apy)
        return apy

    # ------------------------------------------------------------------
    # Vault lifecycle
    # ------------------------------------------------------------------

    @_operation
    def create_vault(self, caller: str, name: str, risk_level: int, min_deposit: int) -> int:
        self._require_admin(caller)
        self._require_not_paused()
        if risk_level not in RISK_LEVEL_STRATEGY or min_deposit < 0:
            raise LedgerError(ErrorCode.INVALID_AMOUNT)

        height = self._chain.block_height
        vault_id = self._platform.total_vaults + 1
        vault = Vault(
            id=vault_id,
            name=name,
            asset=self._asset,
            total_shares=0,
            total_assets=0,
            strategy_id=RISK_LEVEL_STRATEGY[risk_level],
            risk_level=risk_level,
            min_deposit=min_deposit,
            is_active=True,
            created_at=height,
            last_harvest=height,
        )

        self._vaults.put_vault(vault)
        self._platform = replace(self._platform, total_vaults=vault_id)
        logger.info(
            "Vault %d created: '%s' risk=%d strategy=%d",
            vault_id, name, risk_level, vault.strategy_id,
        )
        return vault_id

    @_operation
    def deposit(self, caller: str, vault_id: int, amount: int) -> int:
        self._require_not_paused()
        vault = self._require_active_vault(vault_id)
        if amount < vault.min_deposit:
            raise LedgerError(ErrorCode.MINIMUM_DEPOSIT_NOT_MET)

        minted = shares_for_deposit(amount, vault.total_shares, vault.total_assets)
        if minted <= 0:
            raise LedgerError(ErrorCode.INVALID_AMOUNT)

        height = self._chain.block_height
        existing = self._vaults.get_position(vault_id, caller)
        if existing is None:
            position = UserPosition(
                shares=minted,
                deposited_at=height,
                last_compound=height,
                total_deposited=amount,
            )
        else:
            position = replace(
                existing,
                shares=existing.shares + minted,
                last_compound=height,
                total_deposited=existing.total_deposited + amount,
            )
        updated_vault = replace(
            vault,
            total_shares=vault.total_shares + minted,
            total_assets=vault.total_assets + amount,
        )

        self._transfers.transfer(caller, self._custody, amount)

        self._vaults.put_vault(updated_vault)
        self._vaults.put_position(vault_id, caller, position)
        self._vaults.add_user_vault(caller, vault_id)
        self._platform = replace(
            self._platform,
            total_value_locked=self._platform.total_value_locked + amount,
        )
        logger.info(
            "Deposit: %s -> vault %d amount=%d minted=%d shares",
            caller, vault_id, amount, minted,
        )
        return minted

    @_operation
    def withdraw(self, caller: str, vault_id: int, shares: int) -> int:
        self._require_not_paused()
        vault = self._require_active_vault(vault_id)
        if shares <= 0:
            raise LedgerError(ErrorCode.INVALID_AMOUNT)
        position = self._vaults.get_position(vault_id, caller)
        if position is None:
            raise LedgerError(ErrorCode.INSUFFICIENT_BALANCE)
        if shares > position.shares:
            raise LedgerError(ErrorCode.WITHDRAWAL_TOO_LARGE)

        gross = assets_for_shares(shares, vault.total_shares, vault.total_assets)
        fee = fee_for(gross, self._platform.platform_fee_rate)
        net = gross - fee

        updated_vault = replace(
            vault,
            total_shares=vault.total_shares - shares,
            total_assets=vault.total_assets - gross,
        )
        remaining = position.shares - shares

        payouts = [
            (recipient, amount)
            for recipient, amount in ((caller, net), (self._platform.treasury, fee))
            if amount > 0
        ]
        if payouts:
            self._transfers.transfer_many(self._custody, payouts)

        self._vaults.put_vault(updated_vault)
        if remaining == 0:
            self._vaults.delete_position(vault_id, caller)
        else:
            self._vaults.put_position(
                vault_id,
                caller,
                replace(
                    position,
                    shares=remaining,
                    total_withdrawn=position.total_withdrawn + net,
                ),
            )
        self._platform = replace(
            self._platform,
            total_value_locked=self._platform.total_value_locked - gross,
        )
        logger.info(
            "Withdraw: %s <- vault %d shares=%d gross=%d fee=%d net=%d",
            caller, vault_id, shares, gross, fee, net,
        )
        return net

    @_operation
    def harvest_vault(self, caller: str, vault_id: int) -> bool:
        self._require_admin(caller)
        self._require_not_paused()
        vault = self._require_vault(vault_id)
        strategy = self._require_strategy(vault.strategy_id)

        height = self._chain.block_height
        earned = accrued_yield(
            vault.total_assets,
            strategy.apy,
            height - vault.last_harvest,
            self._blocks_per_year,
        )

        self._vaults.put_vault(
            replace(vault, total_assets=vault.total_assets + earned, last_harvest=height)
        )
        self._platform = replace(
            self._platform,
            total_value_locked=self._platform.total_value_locked + earned,
        )
        logger.info(
            "Harvest: vault %d strategy=%d blocks=%d earned=%d",
            vault_id, strategy.id, height - vault.last_harvest, earned,
        )
        return True

    @_operation
    def rebalance_vault(self, caller: str, vault_id: int, strategy_id: int) -> bool:
        self._require_admin(caller)
        vault = self._require_vault(vault_id)
        self._require_strategy(strategy_id)

        self._vaults.put_vault(
            replace(vault, strategy_id=strategy_id, last_harvest=self._chain.block_height)
        )
        logger.info(
            "Rebalance: vault %d strategy %d -> %d", vault_id, vault.strategy_id, strategy_id
        )
        return True

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    def get_vault_info(self, vault_id: int) -> Vault | None:
        with self._lock:
            return self._vaults.get_vault(vault_id)

    def get_strategy_info(self, strategy_id: int) -> Strategy | None:
        with self._lock:
            return self._strategies.get(strategy_id)

    def get_user_position(self, vault_id: int, user: str) -> UserPosition | None:
        with self._lock:
            return self._vaults.get_position(vault_id, user)

    def get_user_vaults(self, user: str) -> list[int]:
        with self._lock:
            return self._vaults.user_vaults(user)

    def get_user_vault_value(self, vault_id: int, user: str) -> int:
        with self._lock:
            vault = self._vaults.get_vault(vault_id)
            position = self._vaults.get_position(vault_id, user)
            if vault is None or position is None:
                return 0
            return assets_for_shares(position.shares, vault.total_shares, vault.total_assets)

    def get_platform_stats(self) -> PlatformStats:
        with self._lock:
            return self._platform.stats()

    def get_best_apy(self) -> int:
        with self._lock:
            return self._strategies.best_apy()

    def is_user_admin(self, principal: str) -> bool:
        with self._lock:
            return self._platform.is_admin(principal)
