"""Service modules"""
from .collateral_ledger import CollateralLedger
from .risk_engine import RiskEngine
from .monitor import HealthMonitor

__all__ = ["CollateralLedger", "RiskEngine", "HealthMonitor"]
