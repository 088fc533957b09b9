"""Pure fixed-point math for collateral valuation and health factors — no I/O.

Oracle prices carry 8 decimals, asset amounts and USD values carry 18. The
order of multiplication and division below is fixed: reordering changes the
floor rounding and therefore the results.
"""
from __future__ import annotations

from decimal import Decimal

PRECISION = 10**18
FEED_DECIMALS = 8
ADDITIONAL_FEED_PRECISION = 10 ** (18 - FEED_DECIMALS)

# Health factor reported for accounts with no debt.
HEALTH_FACTOR_MAX = 2**256 - 1

DEFAULT_LIQUIDATION_THRESHOLD = 50
DEFAULT_LIQUIDATION_PRECISION = 100
DEFAULT_LIQUIDATION_BONUS = 10
DEFAULT_MIN_HEALTH_FACTOR = PRECISION


def usd_value(price: int, amount: int) -> int:
    """USD value (18 decimals) of ``amount`` priced at ``price`` (8 decimals).

    Example:
        usd_value(3000 * 10**8, 15 * 10**18) → 45000 * 10**18
    """
    return (price * ADDITIONAL_FEED_PRECISION) * amount // PRECISION


def token_amount_from_usd(price: int, usd_amount: int) -> int:
    """Inverse of :func:`usd_value`, floored."""
    return usd_amount * PRECISION // (price * ADDITIONAL_FEED_PRECISION)


def calc_health_factor(
    total_minted: int,
    collateral_value_usd: int,
    liquidation_threshold: int = DEFAULT_LIQUIDATION_THRESHOLD,
    liquidation_precision: int = DEFAULT_LIQUIDATION_PRECISION,
) -> int:
    """Calculate health factor.

    health_factor = (collateral * threshold / precision) * 1e18 / minted
    """
    if total_minted == 0:
        return HEALTH_FACTOR_MAX
    adjusted = collateral_value_usd * liquidation_threshold // liquidation_precision
    return adjusted * PRECISION // total_minted


def with_bonus(amount: int, bonus: int, precision: int = DEFAULT_LIQUIDATION_PRECISION) -> int:
    """Add a liquidation bonus of ``bonus / precision`` on top of ``amount``."""
    return amount + amount * bonus // precision


def to_wad(value: float | int | str) -> int:
    """Convert a human-readable ratio such as ``1.5`` into 18-decimal fixed point."""
    return int(Decimal(str(value)) * PRECISION)


def from_wad(value: int) -> float:
    """Render an 18-decimal fixed-point value as a float for display only."""
    if value == HEALTH_FACTOR_MAX:
        return float("inf")
    return value / PRECISION
