"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from synth_engine.config import RiskConfig
from synth_engine.oracles import StaticPriceOracle
from synth_engine.registry import AssetRegistry
from synth_engine.services import RiskEngine
from synth_engine.tokens import InMemoryCustody, LiabilityToken

ENGINE = "engine"
WAD = 10**18

ETH_FEED = "eth-usd"
BTC_FEED = "btc-usd"
ETH_PRICE = 3000 * 10**8
BTC_PRICE = 1000 * 10**8


class FakeClock:
    """Deterministic replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def registry() -> AssetRegistry:
    return AssetRegistry(["WETH", "WBTC"], [ETH_FEED, BTC_FEED])


@pytest.fixture()
def oracle(clock: FakeClock) -> StaticPriceOracle:
    return StaticPriceOracle({ETH_FEED: ETH_PRICE, BTC_FEED: BTC_PRICE}, clock=clock)


@pytest.fixture()
def custody(registry: AssetRegistry) -> InMemoryCustody:
    return InMemoryCustody(registry.assets)


@pytest.fixture()
def token() -> LiabilityToken:
    return LiabilityToken(owner=ENGINE)


@pytest.fixture()
def engine(
    registry: AssetRegistry,
    oracle: StaticPriceOracle,
    custody: InMemoryCustody,
    token: LiabilityToken,
    clock: FakeClock,
) -> RiskEngine:
    return RiskEngine(
        registry, oracle, custody, token, risk=RiskConfig(), address=ENGINE, clock=clock
    )


@pytest.fixture()
def fund(custody: InMemoryCustody) -> Callable[[str, str, int], None]:
    """Give ``user`` collateral and approve the engine to pull all of it."""

    def _fund(user: str, asset: str, amount: int) -> None:
        custody.mint(asset, user, amount)
        custody.approve(asset, user, ENGINE, custody.balance_of(asset, user))

    return _fund


@pytest.fixture()
def approve_burn(token: LiabilityToken) -> Callable[[str, int], None]:
    """Allow the engine to pull ``amount`` liability tokens from ``user``."""

    def _approve(user: str, amount: int) -> None:
        token.approve(user, ENGINE, amount)

    return _approve


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    engine:
      liquidation_threshold: 50
      liquidation_precision: 100
      liquidation_bonus: 10
      min_health_factor: 1.0
      price_timeout_seconds: 10800
    assets:
      WETH:
        price_feed: eth-usd
      WBTC:
        price_feed: btc-usd
    price_oracle:
      provider: static
      static_prices:
        eth-usd: 300000000000
        btc-usd: 100000000000
    monitor:
      check_interval_minutes: 5
      thresholds:
        health_factor_warning: 1.5
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
