"""Integer share/asset conversions. All divisions floor."""
from __future__ import annotations

BASIS_POINTS = 10_000


def shares_for_deposit(amount: int, total_shares: int, total_assets: int) -> int:
    """Shares minted for depositing ``amount`` into a vault.

    An empty vault mints 1:1. Otherwise the new holder buys in at the current
    per-share value, so existing holders are not diluted.
    """
    if total_shares == 0 or total_assets == 0:
        return amount
    return amount * total_shares // total_assets


def assets_for_shares(shares: int, total_shares: int, total_assets: int) -> int:
    """Assets redeemable for ``shares``; 0 when the vault has no shares."""
    if total_shares == 0:
        return 0
    return shares * total_assets // total_shares


def fee_for(gross: int, fee_rate_bp: int) -> int:
    return gross * fee_rate_bp // BASIS_POINTS


def accrued_yield(
    total_assets: int, apy_bp: int, elapsed_blocks: int, blocks_per_year: int
) -> int:
    """Simple (non-compounding within the period) yield since the last harvest."""
    if elapsed_blocks <= 0 or total_assets == 0:
        return 0
    return total_assets * apy_bp * elapsed_blocks // (BASIS_POINTS * blocks_per_year)
