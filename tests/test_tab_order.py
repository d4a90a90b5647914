"""Tab traversal: cycle completion, focus-trap detection and coverage scoring."""
import pytest

from conftest import BODY, FakeElement, identity
from site_compliance.models import ElementIdentity, StopReason
from site_compliance.tab_order import TabOrderAnalyzer, coverage_threshold

HOME = identity("a", "home", "Home")
ABOUT = identity("a", "about", "About")
SEARCH = identity("input", "q", type="search")


class TestCoverageThreshold:
    @pytest.mark.parametrize("count, expected", [(1, 0.79), (5, 0.75), (10, 0.70), (40, 0.70)])
    def test_threshold(self, count, expected):
        assert coverage_threshold(count) == pytest.approx(expected)


@pytest.mark.asyncio
class TestAnalyze:
    async def test_no_focusable_elements_short_circuits(self, make_session, config):
        session = make_session(tab_sequence=[HOME])
        report = await TabOrderAnalyzer(session, config).analyze(0)

        assert report.stop_reason is StopReason.EMPTY
        assert report.passed
        assert report.no_trap
        assert report.score == 1.0
        assert session.keys == []

    async def test_forward_chain_completes_cycle(self, make_session, config):
        session = make_session(tab_sequence=[HOME, ABOUT, SEARCH, BODY])
        report = await TabOrderAnalyzer(session, config).analyze(3)

        assert report.stop_reason is StopReason.CYCLE_COMPLETE
        assert report.distinct_count == 3
        assert report.score == pytest.approx(1.0)
        assert report.passed
        assert report.no_trap
        assert [v.dom_id for v in report.visited] == ["home", "about", "q"]
        assert report.steps == 8

    async def test_oscillation_is_reported_as_trap(self, make_session, config, caplog):
        session = make_session(tab_sequence=[HOME, ABOUT])
        report = await TabOrderAnalyzer(session, config).analyze(5)

        assert report.stop_reason is StopReason.STUCK
        assert report.trapped
        assert report.stuck_at == ElementIdentity.from_dict(HOME)
        assert len(session.keys) < 10
        assert "stuck" in caplog.text

    async def test_focus_parked_on_one_element_is_a_trap(self, make_session, config):
        session = make_session(tab_sequence=[HOME], cycle=False)
        report = await TabOrderAnalyzer(session, config).analyze(4)

        assert report.trapped
        assert report.steps == 2

    async def test_single_element_wrapping_through_body_is_not_a_trap(self, make_session, config):
        session = make_session(tab_sequence=[HOME, BODY])
        report = await TabOrderAnalyzer(session, config).analyze(1)

        assert report.stop_reason is StopReason.CYCLE_COMPLETE
        assert report.no_trap
        assert report.passed

    async def test_nothing_focusable_by_keyboard_fails_coverage(self, make_session, config):
        session = make_session(tab_sequence=[None])
        report = await TabOrderAnalyzer(session, config).analyze(2)

        assert report.stop_reason is StopReason.CYCLE_COMPLETE
        assert report.distinct_count == 0
        assert not report.passed
        assert report.no_trap

    async def test_exhaustion_respects_step_cap(self, make_session, config):
        sequence = [identity("button", f"b{i}") for i in range(20)]
        session = make_session(tab_sequence=sequence, cycle=False)
        analyzer = TabOrderAnalyzer(session, config.with_overrides(max_tab_steps=4))

        report = await analyzer.analyze(10)

        assert report.stop_reason is StopReason.EXHAUSTED
        assert report.steps == 4
        assert len(session.keys) == 4
        assert report.score == pytest.approx(0.4)
        assert not report.passed

    async def test_step_limit_scales_with_element_count(self, make_session, config):
        analyzer = TabOrderAnalyzer(make_session(), config)
        assert analyzer.max_steps(3) == 16
        assert analyzer.max_steps(100) == config.max_tab_steps

    async def test_reset_clicks_body_corner_then_blurs(self, make_session, config):
        body = FakeElement(tag="body")
        session = make_session(elements={"body": [body]}, tab_sequence=[HOME, BODY])

        await TabOrderAnalyzer(session, config).analyze(1)

        assert session.clicks[0] == (body, {"x": 0, "y": 0})
        assert "blur_active" in session.evaluated

    async def test_custom_identity_function(self, make_session, config):
        seen = iter([ElementIdentity("a", dom_id="x"), ElementIdentity("body"),
                     ElementIdentity("a", dom_id="x"), ElementIdentity("body")])

        async def identify(_session):
            return next(seen)

        session = make_session()
        report = await TabOrderAnalyzer(session, config, identity_fn=identify).analyze(1)

        assert report.stop_reason is StopReason.CYCLE_COMPLETE
        assert report.visited == [ElementIdentity("a", dom_id="x")]

    async def test_summary_mentions_counts(self, make_session, config):
        session = make_session(tab_sequence=[HOME, ABOUT, BODY])
        report = await TabOrderAnalyzer(session, config).analyze(2)

        assert "visited 2 of 2" in report.summary()
        assert "cycle-complete" in report.summary()


@pytest.mark.asyncio
class TestPressTabUntil:
    async def test_reaches_matching_element(self, make_session, config):
        submit = identity("button", "submit", selectors={"#submit"})
        session = make_session(tab_sequence=[HOME, submit, BODY])

        assert await TabOrderAnalyzer(session, config).press_tab_until("#submit")
        assert session.keys == ["Tab", "Tab"]

    async def test_gives_up_when_focus_wraps(self, make_session, config):
        session = make_session(tab_sequence=[HOME, ABOUT, BODY])

        assert not await TabOrderAnalyzer(session, config).press_tab_until("#missing")
        assert len(session.keys) == 3

    async def test_respects_max_tries(self, make_session, config):
        session = make_session(tab_sequence=[HOME, ABOUT, SEARCH])

        assert not await TabOrderAnalyzer(session, config).press_tab_until("#missing", max_tries=2)
        assert len(session.keys) == 2
