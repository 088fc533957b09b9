"""Wire an engine and its price oracle from configuration."""
from __future__ import annotations

import time
from collections.abc import Callable

from .config import AppConfig
from .interfaces.custody import AssetCustody
from .interfaces.liability_token import LiabilityToken
from .interfaces.price_oracle import PriceOracle
from .oracles import PythOracle, StaticPriceOracle
from .registry import AssetRegistry
from .services import HealthMonitor, RiskEngine


def build_oracle(
    config: AppConfig, clock: Callable[[], float] = time.time
) -> PythOracle | StaticPriceOracle:
    """Build the configured price oracle for the configured assets' feeds."""
    oracle_cfg = config.price_oracle
    if oracle_cfg.provider == "static":
        return StaticPriceOracle(oracle_cfg.static_prices, clock=clock)
    return PythOracle(oracle_cfg.pyth, config.price_feeds.values())


def build_engine(
    config: AppConfig,
    *,
    custody: AssetCustody,
    token: LiabilityToken,
    oracle: PriceOracle | None = None,
    clock: Callable[[], float] = time.time,
    address: str = "engine",
) -> RiskEngine:
    registry = AssetRegistry.from_mapping(config.price_feeds)
    return RiskEngine(
        registry,
        oracle if oracle is not None else build_oracle(config, clock=clock),
        custody,
        token,
        risk=config.engine,
        address=address,
        clock=clock,
    )


def build_monitor(config: AppConfig, engine: RiskEngine) -> HealthMonitor:
    return HealthMonitor(
        engine,
        thresholds=config.monitor.thresholds,
        check_interval_minutes=config.monitor.check_interval_minutes,
    )
