"""Health monitor — sweeps every known account and flags liquidation risk."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..config import ThresholdsConfig
from ..fixed_point import from_wad
from ..models import HealthReport
from .risk_engine import RiskEngine

logger = logging.getLogger(__name__)

STATUS_HEALTHY = "healthy"
STATUS_WARNING = "warning"
STATUS_LIQUIDATABLE = "liquidatable"


class HealthMonitor:
    """Read-only view over the engine's accounts, grouped by risk status."""

    def __init__(
        self,
        engine: RiskEngine,
        thresholds: ThresholdsConfig | None = None,
        check_interval_minutes: int = 15,
    ) -> None:
        self._engine = engine
        self._thresholds = thresholds or ThresholdsConfig()
        self._check_interval_minutes = check_interval_minutes

    def _get_status(self, health_factor: int) -> str:
        if health_factor < self._engine.min_health_factor:
            return STATUS_LIQUIDATABLE
        if health_factor < self._thresholds.health_factor_warning:
            return STATUS_WARNING
        return STATUS_HEALTHY

    def report(self, user: str) -> HealthReport:
        info = self._engine.account_information(user)
        factor = self._engine.calculate_health_factor(
            info.total_minted, info.collateral_value_usd
        )
        return HealthReport(
            user=user,
            total_minted=info.total_minted,
            collateral_value_usd=info.collateral_value_usd,
            health_factor=factor,
            status=self._get_status(factor),
        )

    def check(self) -> list[HealthReport]:
        """Report on every account the engine has seen.

        Oracle failures propagate: a stale feed makes the whole sweep fail.
        """
        reports: list[HealthReport] = []
        for user in self._engine.store.users():
            report = self.report(user)
            reports.append(report)

            level = logging.INFO if report.status == STATUS_HEALTHY else logging.WARNING
            logger.log(
                level,
                "Account %s · %s · Collateral: $%.2f  Minted: %.2f  HF: %.4f",
                user,
                report.status,
                from_wad(report.collateral_value_usd),
                from_wad(report.total_minted),
                from_wad(report.health_factor),
            )
        return reports

    def liquidation_candidates(self) -> list[HealthReport]:
        return [r for r in self.check() if r.status == STATUS_LIQUIDATABLE]

    async def run_continuous(
        self,
        check_interval_minutes: int | None = None,
        refresh: Callable[[], Awaitable[Any]] | None = None,
    ) -> None:
        """Run continuous monitoring loop.

        Args:
            refresh: Optional coroutine function awaited before each sweep,
                e.g. ``PythOracle.refresh``.
        """
        interval = check_interval_minutes or self._check_interval_minutes
        logger.info(
            "Starting continuous monitoring (checking every %d minutes)", interval
        )

        while True:
            try:
                if refresh is not None:
                    await refresh()
                candidates = [r for r in self.check() if r.status == STATUS_LIQUIDATABLE]
                if candidates:
                    logger.warning("%d account(s) can be liquidated", len(candidates))
                await asyncio.sleep(interval * 60)
            except Exception as e:
                logger.error("Error in monitoring loop: %s", e)
                await asyncio.sleep(60)
