"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

MAX_PLATFORM_FEE_RATE = 1000
BOOTSTRAP_STRATEGY_COUNT = 3

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StrategySeed:
    name: str
    protocol: str
    apy: int
    tvl_capacity: int
    risk_score: int


DEFAULT_STRATEGIES: tuple[StrategySeed, ...] = (
    StrategySeed("STX-Staking-Strategy", "stx-vault", 1200, 100_000_000_000, 3),
    StrategySeed("Lending-Protocol-Strategy", "arkadiko", 800, 50_000_000_000, 5),
    StrategySeed("LP-Farming-Strategy", "alex", 1500, 25_000_000_000, 7),
)


@dataclass(frozen=True)
class LedgerConfig:
    owner: str = "deployer"
    treasury: str = ""
    asset: str = ""
    custody: str = ""
    platform_fee_rate: int = 50
    blocks_per_year: int = 52560

    @property
    def asset_reference(self) -> str:
        return self.asset or f"{self.owner}.stx-token"

    @property
    def custody_account(self) -> str:
        return self.custody or f"{self.owner}.yield-vault"

    @property
    def treasury_account(self) -> str:
        return self.treasury or self.owner


@dataclass(frozen=True)
class ApiConfig:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class AppConfig:
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    strategies: tuple[StrategySeed, ...] = DEFAULT_STRATEGIES
    api: ApiConfig = field(default_factory=ApiConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_ledger(raw: dict[str, Any]) -> LedgerConfig:
    return LedgerConfig(
        owner=raw.get("owner", "deployer"),
        treasury=raw.get("treasury", ""),
        asset=raw.get("asset", ""),
        custody=raw.get("custody", ""),
        platform_fee_rate=int(raw.get("platform_fee_rate", 50)),
        blocks_per_year=int(raw.get("blocks_per_year", 52560)),
    )


def _build_strategies(raw: list[dict[str, Any]] | None) -> tuple[StrategySeed, ...]:
    if raw is None:
        return DEFAULT_STRATEGIES
    seeds: list[StrategySeed] = []
    for s in raw:
        seeds.append(
            StrategySeed(
                name=s.get("name", ""),
                protocol=s.get("protocol", ""),
                apy=int(s.get("apy", 0)),
                tvl_capacity=int(s.get("tvl_capacity", 0)),
                risk_score=int(s.get("risk_score", 0)),
            )
        )
    return tuple(seeds)


def _build_api(raw: dict[str, Any]) -> ApiConfig:
    return ApiConfig(
        host=raw.get("host", "127.0.0.1"),
        port=int(raw.get("port", 8080)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        ledger=_build_ledger(raw.get("ledger") or {}),
        strategies=_build_strategies(raw.get("strategies")),
        api=_build_api(raw.get("api") or {}),
    )

    validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    ledger = cfg.ledger
    if not ledger.owner:
        raise ValueError("Ledger owner must be configured")
    if not 0 <= ledger.platform_fee_rate <= MAX_PLATFORM_FEE_RATE:
        raise ValueError(
            f"platform_fee_rate must be within [0, {MAX_PLATFORM_FEE_RATE}] bp"
        )
    if ledger.blocks_per_year <= 0:
        raise ValueError("blocks_per_year must be positive")

    if len(cfg.strategies) != BOOTSTRAP_STRATEGY_COUNT:
        raise ValueError(
            f"Exactly {BOOTSTRAP_STRATEGY_COUNT} bootstrap strategies are required, "
            f"got {len(cfg.strategies)}"
        )
    for seed in cfg.strategies:
        if not 1 <= seed.risk_score <= 10:
            raise ValueError(
                f"Strategy '{seed.name}' has risk_score {seed.risk_score} outside [1, 10]"
            )
