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

from .fixed_point import (
    DEFAULT_LIQUIDATION_BONUS,
    DEFAULT_LIQUIDATION_PRECISION,
    DEFAULT_LIQUIDATION_THRESHOLD,
    DEFAULT_MIN_HEALTH_FACTOR,
    to_wad,
)

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("pyth", "static")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RiskConfig:
    liquidation_threshold: int = DEFAULT_LIQUIDATION_THRESHOLD
    liquidation_precision: int = DEFAULT_LIQUIDATION_PRECISION
    liquidation_bonus: int = DEFAULT_LIQUIDATION_BONUS
    min_health_factor: int = DEFAULT_MIN_HEALTH_FACTOR
    price_timeout_seconds: int = 3 * 60 * 60


@dataclass(frozen=True)
class AssetConfig:
    price_feed: str = ""


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    timeout_seconds: int = 30


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)
    static_prices: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ThresholdsConfig:
    health_factor_warning: int = to_wad("1.5")


@dataclass(frozen=True)
class MonitorConfig:
    check_interval_minutes: int = 15
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)


@dataclass(frozen=True)
class AppConfig:
    engine: RiskConfig = field(default_factory=RiskConfig)
    assets: dict[str, AssetConfig] = field(default_factory=dict)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)

    @property
    def price_feeds(self) -> dict[str, str]:
        """Asset id → feed id, in configuration order."""
        return {name: asset.price_feed for name, asset in self.assets.items()}


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


def _build_engine(raw: dict[str, Any]) -> RiskConfig:
    return RiskConfig(
        liquidation_threshold=int(
            raw.get("liquidation_threshold", DEFAULT_LIQUIDATION_THRESHOLD)
        ),
        liquidation_precision=int(
            raw.get("liquidation_precision", DEFAULT_LIQUIDATION_PRECISION)
        ),
        liquidation_bonus=int(raw.get("liquidation_bonus", DEFAULT_LIQUIDATION_BONUS)),
        min_health_factor=to_wad(raw.get("min_health_factor", "1")),
        price_timeout_seconds=int(raw.get("price_timeout_seconds", 3 * 60 * 60)),
    )


def _build_assets(raw: dict[str, Any]) -> dict[str, AssetConfig]:
    assets: dict[str, AssetConfig] = {}
    for name, cfg in raw.items():
        if isinstance(cfg, str):
            assets[name] = AssetConfig(price_feed=cfg)
        else:
            assets[name] = AssetConfig(price_feed=str((cfg or {}).get("price_feed", "")))
    return assets


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            timeout_seconds=int(pyth_raw.get("timeout_seconds", 30)),
        ),
        static_prices={
            str(k): int(v) for k, v in (raw.get("static_prices") or {}).items()
        },
    )


def _build_monitor(raw: dict[str, Any]) -> MonitorConfig:
    thresholds = raw.get("thresholds", {})
    return MonitorConfig(
        check_interval_minutes=int(raw.get("check_interval_minutes", 15)),
        thresholds=ThresholdsConfig(
            health_factor_warning=to_wad(thresholds.get("health_factor_warning", "1.5")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate engine configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
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
        engine=_build_engine(raw.get("engine", {})),
        assets=_build_assets(raw.get("assets", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        monitor=_build_monitor(raw.get("monitor", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.assets:
        raise ValueError("At least one collateral asset must be configured")

    for name, asset in cfg.assets.items():
        if not asset.price_feed:
            raise ValueError(f"Asset '{name}' has no price feed")

    risk = cfg.engine
    if risk.liquidation_precision <= 0:
        raise ValueError("liquidation_precision must be positive")
    if not 0 < risk.liquidation_threshold <= risk.liquidation_precision:
        raise ValueError(
            "liquidation_threshold must be in (0, liquidation_precision], "
            f"got {risk.liquidation_threshold}"
        )
    if risk.liquidation_bonus < 0:
        raise ValueError("liquidation_bonus cannot be negative")
    if risk.min_health_factor <= 0:
        raise ValueError("min_health_factor must be positive")
    if risk.price_timeout_seconds <= 0:
        raise ValueError("price_timeout_seconds must be positive")

    oracle = cfg.price_oracle
    if oracle.provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unknown price oracle provider '{oracle.provider}'")
    if oracle.provider == "static":
        for name, asset in cfg.assets.items():
            if asset.price_feed not in oracle.static_prices:
                raise ValueError(
                    f"Asset '{name}' feed '{asset.price_feed}' has no static price"
                )
