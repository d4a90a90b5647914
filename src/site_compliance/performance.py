"""Core Web Vitals collection (LCP, FID, CLS) plus navigation timing."""
from __future__ import annotations

import logging
from typing import Optional

import anyio

from site_compliance.browser import BrowserSession
from site_compliance.config import ComplianceConfig, settings
from site_compliance.models import NavigationTiming, PerformanceMetrics
from site_compliance.scripts import NAVIGATION_TIMING, PERFORMANCE_METRICS

logger = logging.getLogger(__name__)

# Extra wall-clock allowance on top of the in-page budget for the round trip.
GUARD_GRACE_SECONDS = 2.0


class PerformanceMetricsCollector:
    """Collects LCP/FID/CLS within a fixed budget.

    LCP and FID only exist after a paint and a real user input; on an idle
    page either may never arrive. The in-page script resolves once both have
    fired or the budget elapses, and CLS is always computed. A Python-side
    guard returns an empty, timed-out result if the page never answers.
    """

    def __init__(self, session: BrowserSession, config: Optional[ComplianceConfig] = None) -> None:
        self.session = session
        self.config = config or settings

    async def collect(self, budget_ms: Optional[int] = None) -> PerformanceMetrics:
        budget_ms = self.config.metrics_budget_ms if budget_ms is None else budget_ms
        result: Optional[dict] = None
        with anyio.move_on_after(budget_ms / 1000 + GUARD_GRACE_SECONDS) as scope:
            result = await self.session.evaluate(PERFORMANCE_METRICS, budget_ms)
        if scope.cancelled_caught:
            logger.warning(f"Performance script did not answer within {budget_ms}ms budget")
            return PerformanceMetrics(timed_out=True)

        metrics = PerformanceMetrics.from_dict(result)
        if metrics.timed_out:
            logger.info(
                f"Performance budget elapsed: lcp={metrics.lcp} fid={metrics.fid} cls={metrics.cls:.4f}"
            )
        return metrics

    async def navigation_timing(self) -> NavigationTiming:
        return NavigationTiming.from_dict(await self.session.evaluate(NAVIGATION_TIMING))
