"""End-to-end checks through ComplianceOrchestrator on a scripted session."""
import pytest

from conftest import BODY, FakeElement, identity
from site_compliance.browser import ToolError
from site_compliance.orchestrator import ComplianceOrchestrator
from site_compliance.registries import UnknownRuleError

pytestmark = pytest.mark.asyncio


def text_element(color, background="rgb(255, 255, 255)", size="16px", weight="400", **kwargs):
    styles = {"color": color, "backgroundColor": background, "fontSize": size, "fontWeight": weight}
    return FakeElement(styles=styles, **kwargs)


class TestContrast:
    async def test_dark_text_passes(self, make_session, config):
        session = make_session(elements={"p": [text_element("rgb(0, 0, 0)")]})
        result = await ComplianceOrchestrator(session, config).check_contrast("p")

        assert result.passed
        assert result.measured == 21.0

    async def test_grey_text_fails_normal_threshold(self, make_session, config):
        session = make_session(elements={"p": [text_element("rgb(119, 119, 119)")]})
        result = await ComplianceOrchestrator(session, config).check_contrast("p")

        assert not result.passed
        assert result.measured == pytest.approx(4.48, abs=0.01)
        assert "required 4.5:1" in result.message

    async def test_large_text_uses_relaxed_threshold(self, make_session, config):
        session = make_session(elements={"h1": [text_element("rgb(119, 119, 119)", size="32px")]})
        assert (await ComplianceOrchestrator(session, config).check_contrast("h1")).passed

    async def test_explicit_ratio_overrides(self, make_session, config):
        session = make_session(elements={"p": [text_element("rgb(0, 0, 0)")]})
        result = await ComplianceOrchestrator(session, config).check_contrast("p", min_ratio=21.5)
        assert not result.passed

    async def test_missing_element_fails(self, make_session, config):
        result = await ComplianceOrchestrator(make_session(), config).check_contrast(".nope")
        assert not result.passed
        assert "no element found" in result.message

    async def test_element_handle_target(self, make_session, config):
        element = text_element("rgb(255, 255, 255)", background="rgb(0, 0, 0)")
        result = await ComplianceOrchestrator(make_session(), config).check_contrast(element)
        assert result.passed

    async def test_many(self, make_session, config):
        session = make_session(elements={
            "h1": [text_element("rgb(0, 0, 0)")],
            "small": [text_element("rgb(200, 200, 200)")],
        })
        results = await ComplianceOrchestrator(session, config).check_contrast_many(["h1", "small"])
        assert [r.passed for r in results] == [True, False]


class TestKeyboard:
    async def test_no_trap_counts_focusable_elements(self, make_session, config):
        session = make_session(
            scripts={"count_focusable": 2},
            tab_sequence=[identity("a", "one"), identity("a", "two"), BODY],
        )
        audit = ComplianceOrchestrator(session, config)

        result = await audit.check_no_keyboard_trap()
        assert result.passed
        assert result.measured == pytest.approx(1.0)
        assert "count_focusable" in session.evaluated

    async def test_trap_detected(self, make_session, config):
        session = make_session(tab_sequence=[identity("a", "one"), identity("a", "two")])
        result = await ComplianceOrchestrator(session, config).check_no_keyboard_trap(expected_count=6)

        assert not result.passed
        assert "trapped" in result.message

    async def test_logical_order_scores_coverage(self, make_session, config):
        session = make_session(tab_sequence=[identity("a", "one"), BODY])
        result = await ComplianceOrchestrator(session, config).check_logical_tab_order(expected_count=4)

        assert not result.passed
        assert result.measured == pytest.approx(0.25)

    async def test_browser_failure_becomes_failed_result(self, make_session, config):
        session = make_session(tab_sequence=[identity("a", "one")])

        async def broken(_key):
            raise ToolError(name="press_key", payload={"key": "Tab"}, message="page crashed")

        session.press_key = broken
        result = await ComplianceOrchestrator(session, config).check_no_keyboard_trap(expected_count=1)

        assert not result.passed
        assert "page crashed" in result.message

    async def test_keyboard_accessibility_profiles(self, make_session, config):
        good = FakeElement(tag="button", keyboard={"focusable": True, "focusIndicator": True, "operable": True})
        bad = FakeElement(tag="div", keyboard={"focusable": False, "focusIndicator": False, "operable": True})
        hidden = FakeElement(visible=False)
        session = make_session(elements={".control": [good, bad, hidden]})

        result = await ComplianceOrchestrator(session, config).check_keyboard_accessibility(".control")

        assert not result.passed
        assert "1 not focusable" in result.message
        assert "of 2" in result.message

    async def test_keyboard_accessibility_vacuous(self, make_session, config):
        result = await ComplianceOrchestrator(make_session(), config).check_keyboard_accessibility(".none")
        assert result.passed

    async def test_focus_reachable(self, make_session, config):
        session = make_session(tab_sequence=[identity("a"), identity("button", selectors={"#buy"}), BODY])
        assert (await ComplianceOrchestrator(session, config).check_focus_reachable("#buy")).passed


class TestRules:
    async def test_cues(self, make_session, config):
        link = FakeElement(tag="a", text="Docs", styles={"color": "rgb(0, 102, 204)"})
        session = make_session(elements={"a.cta": [link]})
        audit = ComplianceOrchestrator(session, config)

        result = await audit.check_cues("a.cta", ["color", "icon", "text", "underline"], minimum=2)
        assert result.passed
        assert result.measured == 2

    async def test_hover_state_is_triggered_before_validation(self, make_session, config):
        link = FakeElement(
            styles={"cursor": "auto", "backgroundColor": "transparent", "borderColor": "transparent"},
            hover_styles={"backgroundColor": "rgb(230, 230, 230)"},
        )
        session = make_session(elements={"a": [link]})

        result = await ComplianceOrchestrator(session, config).check_state("a", "Hover")

        assert result.passed
        assert session.hovered == [link]

    async def test_focus_state_without_indicator(self, make_session, config):
        field = FakeElement(styles={"outlineStyle": "none", "boxShadow": "none", "borderColor": "transparent"})
        session = make_session(elements={"input": [field]})

        result = await ComplianceOrchestrator(session, config).check_state("input", "focus")

        assert not result.passed
        assert session.focused == [field]

    async def test_unknown_state_raises(self, make_session, config):
        with pytest.raises(UnknownRuleError):
            await ComplianceOrchestrator(make_session(), config).check_state("a", "wiggle")

    async def test_unknown_state_skipped_under_warn(self, make_session, config):
        audit = ComplianceOrchestrator(make_session(), config.with_overrides(unknown_rules="warn"))
        assert await audit.check_state("a", "wiggle") is None

    async def test_missing_element_fails_rule(self, make_session, config):
        result = await ComplianceOrchestrator(make_session(), config).check_spacing("footer", "vertical")
        assert not result.passed
        assert "element not found" in result.message

    async def test_adaptation_after_reduced_motion(self, make_session, config):
        banner = FakeElement(styles={"animationDuration": "0s"})
        session = make_session(elements={".banner": [banner]})

        result = await ComplianceOrchestrator(session, config).check_adaptation(
            ".banner", "disabled/minimal", preference="prefers-reduced-motion", setting="enabled",
        )

        assert result.passed
        assert session.media == [{"reduced_motion": "reduce"}]

    @pytest.mark.parametrize("behaviour", ["disabled", "simplified", "no auto-advance"])
    async def test_adaptation_on_detached_element_fails(self, make_session, config, behaviour):
        hero = FakeElement(
            detached=True,
            styles={"transform": "matrix(1.1, 0, 0, 1.1, 0, 0)", "filter": "blur(2px)", "transitionDuration": "0.5s"},
            attrs={"data-autoplay": "true"},
        )
        session = make_session(elements={".hero": [hero]})

        result = await ComplianceOrchestrator(session, config).check_adaptation(".hero", behaviour)

        assert not result.passed
        assert f"fails adaptation behaviour '{behaviour}'" in result.message

    async def test_layout_and_style(self, make_session, config):
        footer = FakeElement(tag="footer", children={".copyright-text, .copyright": [FakeElement(text="© Example")]})
        button = FakeElement(styles={"borderRadius": "12px"})
        session = make_session(elements={"footer": [footer], ".social-button": [button]})
        audit = ComplianceOrchestrator(session, config)

        assert (await audit.check_layout("footer", "Copyright Text")).passed
        assert (await audit.check_style(".social-button", "background")).passed

    async def test_visual_elements(self, make_session, config):
        body = FakeElement(tag="body", children={"img": [FakeElement(tag="img", attrs={"src": "/x.png"})]})
        session = make_session(elements={"body": [body]})

        result = await ComplianceOrchestrator(session, config).check_visual_elements("Content images")

        assert not result.passed
        assert result.measured == 1


class TestPageLevel:
    async def test_performance_budgets(self, make_session, config):
        session = make_session(scripts={"performance_metrics": {"lcp": 3100, "fid": None, "cls": 0.05}})
        lcp, fid, cls = await ComplianceOrchestrator(session, config).check_performance()

        assert not lcp.passed
        assert fid.passed and "not observed" in fid.message
        assert cls.passed

    async def test_responsive_delegates(self, make_session, config):
        layout = {"hasHorizontalScroll": False, "smallTextCount": 0, "smallTouchTargets": [], "mainWidth": 700}
        session = make_session(scripts={"responsive_snapshot": layout})

        results = await ComplianceOrchestrator(session, config).check_responsive({"width": 768, "height": 1024})

        assert all(results)
