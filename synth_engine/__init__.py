"""Over-collateralized synthetic asset engine."""
from .config import AppConfig, RiskConfig, load_config
from .factory import build_engine, build_monitor, build_oracle
from .fixed_point import HEALTH_FACTOR_MAX, PRECISION
from .registry import AssetRegistry
from .services import CollateralLedger, HealthMonitor, RiskEngine
from .store import LedgerStore

__all__ = [
    "AppConfig",
    "AssetRegistry",
    "CollateralLedger",
    "HEALTH_FACTOR_MAX",
    "HealthMonitor",
    "LedgerStore",
    "PRECISION",
    "RiskConfig",
    "RiskEngine",
    "build_engine",
    "build_monitor",
    "build_oracle",
    "load_config",
]
