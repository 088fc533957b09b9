"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceReading:
    """Latest oracle answer for a feed: 8-decimal price and unix timestamp."""

    price: int
    updated_at: int


@dataclass(frozen=True)
class AccountInformation:
    total_minted: int
    collateral_value_usd: int


@dataclass(frozen=True)
class CollateralDeposited:
    user: str
    asset: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    asset: str
    amount: int


@dataclass(frozen=True)
class HealthReport:
    """Snapshot of one account produced by the health monitor."""

    user: str
    total_minted: int
    collateral_value_usd: int
    health_factor: int
    status: str = "healthy"
