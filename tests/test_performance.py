"""Core Web Vitals collection within a budget."""
import asyncio

import pytest

from site_compliance import performance
from site_compliance.models import PerformanceMetrics
from site_compliance.performance import PerformanceMetricsCollector

pytestmark = pytest.mark.asyncio


class TestPerformanceMetricsCollector:
    async def test_full_result(self, make_session, config):
        session = make_session(scripts={
            "performance_metrics": {"lcp": 1200.5, "fid": 8, "cls": 0.02, "timedOut": False},
        })
        metrics = await PerformanceMetricsCollector(session, config).collect()

        assert metrics == PerformanceMetrics(lcp=1200.5, fid=8.0, cls=0.02, timed_out=False)
        assert metrics.complete

    async def test_partial_result_keeps_cls(self, make_session, config):
        session = make_session(scripts={
            "performance_metrics": {"lcp": 900, "fid": None, "cls": 0.15, "timedOut": True},
        })
        metrics = await PerformanceMetricsCollector(session, config).collect()

        assert metrics.lcp == 900
        assert metrics.fid is None
        assert metrics.cls == pytest.approx(0.15)
        assert metrics.timed_out
        assert not metrics.complete

    async def test_budget_passed_to_page(self, make_session, config):
        budgets = []

        def answer(budget):
            budgets.append(budget)
            return {"cls": 0}

        session = make_session(scripts={"performance_metrics": answer})
        collector = PerformanceMetricsCollector(session, config)
        await collector.collect()
        await collector.collect(budget_ms=250)

        assert budgets == [config.metrics_budget_ms, 250]

    async def test_guard_returns_empty_result_when_page_hangs(self, make_session, config, monkeypatch, caplog):
        async def never_answers(_budget):
            await asyncio.sleep(30)

        monkeypatch.setattr(performance, "GUARD_GRACE_SECONDS", 0.05)
        session = make_session(scripts={"performance_metrics": never_answers})

        metrics = await PerformanceMetricsCollector(session, config).collect(budget_ms=0)

        assert metrics == PerformanceMetrics(timed_out=True)
        assert "did not answer" in caplog.text

    async def test_navigation_timing(self, make_session, config):
        session = make_session(scripts={
            "navigation_timing": {"ttfb": 80.0, "fcp": 420.0, "domContentLoaded": 600.0, "load": None},
        })
        timing = await PerformanceMetricsCollector(session, config).navigation_timing()

        assert timing.ttfb == 80.0
        assert timing.dom_content_loaded == 600.0
        assert timing.load is None
