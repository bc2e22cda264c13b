"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from vault_ledger.chains import SimulatedChain
from vault_ledger.config import AppConfig, ApiConfig, LedgerConfig
from vault_ledger.models import UserPosition, Vault
from vault_ledger.services import LedgerEngine

DEPLOYER = "deployer"
WALLET_1 = "wallet_1"
WALLET_2 = "wallet_2"
TREASURY = "treasury"

STARTING_BALANCE = 10**12


# ---------------------------------------------------------------------------
# Ledger fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        ledger=LedgerConfig(owner=DEPLOYER, treasury=TREASURY),
        api=ApiConfig(host="127.0.0.1", port=0),
    )


@pytest.fixture()
def chain() -> SimulatedChain:
    return SimulatedChain(
        balances={WALLET_1: STARTING_BALANCE, WALLET_2: STARTING_BALANCE},
        start_height=1,
    )


@pytest.fixture()
def engine(sample_app_config: AppConfig, chain: SimulatedChain) -> LedgerEngine:
    return LedgerEngine(sample_app_config, chain)


@pytest.fixture()
def vault_id(engine: LedgerEngine) -> int:
    """A balanced (risk 2) vault with a 1 STX minimum deposit."""
    return engine.create_vault(DEPLOYER, "Balanced Growth Vault", 2, 1_000_000).unwrap()


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_vault() -> Vault:
    return Vault(
        id=1,
        name="Conservative STX Vault",
        asset="deployer.stx-token",
        total_shares=5_000_000,
        total_assets=5_250_000,
        strategy_id=2,
        risk_level=1,
        min_deposit=1_000_000,
        is_active=True,
        created_at=10,
        last_harvest=10,
    )


@pytest.fixture()
def sample_position() -> UserPosition:
    return UserPosition(
        shares=5_000_000,
        deposited_at=11,
        last_compound=11,
        total_deposited=5_000_000,
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    ledger:
      owner: deployer
      treasury: treasury
      asset: deployer.stx-token
      custody: deployer.yield-vault
      platform_fee_rate: 50
      blocks_per_year: 52560
    strategies:
      - name: STX-Staking-Strategy
        protocol: stx-vault
        apy: 1200
        tvl_capacity: 100000000000
        risk_score: 3
      - name: Lending-Protocol-Strategy
        protocol: arkadiko
        apy: 800
        tvl_capacity: 50000000000
        risk_score: 5
      - name: LP-Farming-Strategy
        protocol: alex
        apy: 1500
        tvl_capacity: 25000000000
        risk_score: 7
    api:
      host: 0.0.0.0
      port: 9090
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
