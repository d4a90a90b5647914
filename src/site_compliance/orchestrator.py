"""High-level compliance checks composed from the engine's parts.

Each public ``check_*`` coroutine returns a :class:`CheckResult` (or a list
of them) naming the element and the expectation. Rule-based checks return
``None`` when the rule label is unknown and the registry's policy is
"warn", meaning the check was skipped.

Targets may be a CSS selector (first match is used) or an element handle
obtained from the same session.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from site_compliance.browser import BrowserSession, ToolError
from site_compliance.config import ComplianceConfig, settings
from site_compliance.contrast import contrast_ratio, required_ratio
from site_compliance.models import CheckResult, ElementRef, PerformanceMetrics, ViewportSize
from site_compliance.performance import PerformanceMetricsCollector
from site_compliance.registries import (
    AdaptationRegistry,
    CueRegistry,
    ElementValidator,
    LayoutRegistry,
    PreferenceRegistry,
    SpacingRegistry,
    StateRegistry,
    StyleRegistry,
    ValidatorRegistry,
    VisualElementRegistry,
)
from site_compliance.registries.preferences import Setting
from site_compliance.responsive import ResponsiveChecker
from site_compliance.scripts import KEYBOARD_PROFILE
from site_compliance.structure import StructureChecker
from site_compliance.styles import StyleAccessor
from site_compliance.tab_order import DEFAULT_FOCUSABLE_SELECTOR, IdentityFn, TabOrderAnalyzer

logger = logging.getLogger(__name__)

Target = Union[str, ElementRef]

CONTRAST_PROPERTIES = ("color", "backgroundColor", "fontSize", "fontWeight")

# Core Web Vitals "good" thresholds
LCP_GOOD_MS = 2500.0
FID_GOOD_MS = 100.0
CLS_GOOD = 0.1


def _describe(target: Target) -> str:
    return target if isinstance(target, str) else "element"


class ComplianceOrchestrator:
    """Runs accessibility, layout, responsive and performance checks on one session."""

    def __init__(
        self,
        session: BrowserSession,
        config: Optional[ComplianceConfig] = None,
        *,
        identity_fn: Optional[IdentityFn] = None,
        cues: Optional[CueRegistry] = None,
        states: Optional[StateRegistry] = None,
        adaptations: Optional[AdaptationRegistry] = None,
        layout: Optional[LayoutRegistry] = None,
        spacing: Optional[SpacingRegistry] = None,
        styles: Optional[StyleRegistry] = None,
        preferences: Optional[PreferenceRegistry] = None,
        visual: Optional[VisualElementRegistry] = None,
    ) -> None:
        self.session = session
        self.config = config or settings
        policy = self.config.unknown_rules

        self.cues = cues or CueRegistry(policy)
        self.states = states or StateRegistry(policy)
        self.adaptations = adaptations or AdaptationRegistry(policy)
        self.layout = layout or LayoutRegistry(policy)
        self.spacing = spacing or SpacingRegistry(policy)
        self.styles = styles or StyleRegistry(policy)
        self.preferences = preferences or PreferenceRegistry(policy)
        self.visual = visual or VisualElementRegistry(policy)

        self.style_accessor = StyleAccessor(session)
        self.tab_order = TabOrderAnalyzer(session, self.config, identity_fn)
        self.performance = PerformanceMetricsCollector(session, self.config)
        self.structure = StructureChecker(session)
        self.responsive = ResponsiveChecker(session, self.config)

    # --- element resolution -------------------------------------------

    async def _resolve(self, target: Target) -> Optional[ElementRef]:
        if not isinstance(target, str):
            return target
        matches = await self.session.query(target)
        return matches[0] if matches else None

    async def _settle(self) -> None:
        await self.session.wait_for_timeout(self.config.interaction_settle_ms)

    # --- keyboard -----------------------------------------------------

    async def check_keyboard_accessibility(self, selector: str) -> CheckResult:
        """Every visible match is focusable, shows a focus indicator and is operable."""
        visible = [el for el in await self.session.query(selector) if await self.session.is_visible(el)]
        if not visible:
            return CheckResult.ok(f"{selector}: no visible elements to check", 0)

        failures = {"not focusable": 0, "without focus indicator": 0, "not operable": 0}
        for element in visible:
            profile = await self.session.evaluate_on(element, KEYBOARD_PROFILE) or {}
            if not profile.get("focusable"):
                failures["not focusable"] += 1
            if not profile.get("focusIndicator"):
                failures["without focus indicator"] += 1
            if not profile.get("operable"):
                failures["not operable"] += 1

        problems = [f"{count} {problem}" for problem, count in failures.items() if count]
        if problems:
            return CheckResult.fail(f"{selector}: {', '.join(problems)} of {len(visible)}", len(visible))
        return CheckResult.ok(f"{selector}: {len(visible)} elements keyboard accessible", len(visible))

    async def _tab_report(self, expected_count: Optional[int]):
        if expected_count is None:
            expected_count = await self.tab_order.count_focusable(DEFAULT_FOCUSABLE_SELECTOR)
        return await self.tab_order.analyze(expected_count)

    async def check_no_keyboard_trap(self, expected_count: Optional[int] = None) -> CheckResult:
        try:
            report = await self._tab_report(expected_count)
        except ToolError as exc:
            logger.error(f"Tab traversal failed: {exc}")
            return CheckResult.fail(f"Tab traversal failed: {exc.message}")
        if report.trapped:
            return CheckResult.fail(f"Keyboard focus trapped: {report.summary()}", report.score)
        return CheckResult.ok(f"No keyboard trap: {report.summary()}", report.score)

    async def check_logical_tab_order(self, expected_count: Optional[int] = None) -> CheckResult:
        try:
            report = await self._tab_report(expected_count)
        except ToolError as exc:
            logger.error(f"Tab traversal failed: {exc}")
            return CheckResult.fail(f"Tab traversal failed: {exc.message}")
        return CheckResult(report.passed, report.summary(), report.score)

    async def check_focus_reachable(self, selector: str) -> CheckResult:
        reached = await self.tab_order.press_tab_until(selector)
        if reached:
            return CheckResult.ok(f"{selector}: reachable with Tab")
        return CheckResult.fail(f"{selector}: not reachable with Tab")

    # --- contrast -----------------------------------------------------

    async def check_contrast(self, target: Target, min_ratio: Optional[float] = None) -> CheckResult:
        """Text colour against the element's own background colour."""
        name = _describe(target)
        element = await self._resolve(target)
        if element is None:
            return CheckResult.fail(f"{name}: no element found for contrast check")

        snapshot = await self.style_accessor.snapshot(element, CONTRAST_PROPERTIES)
        color, background = snapshot["color"], snapshot["backgroundColor"]
        if min_ratio is None:
            min_ratio = required_ratio(
                snapshot["fontSize"], snapshot["fontWeight"],
                normal=self.config.min_contrast, large=self.config.min_contrast_large,
            )
        ratio = contrast_ratio(color, background)
        message = f"{name}: contrast {ratio:.2f}:1 ({color} on {background}), required {min_ratio}:1"
        return CheckResult(ratio >= min_ratio, message, round(ratio, 2))

    async def check_contrast_many(self, selectors: Iterable[str], min_ratio: Optional[float] = None) -> List[CheckResult]:
        results = [await self.check_contrast(selector, min_ratio) for selector in selectors]
        failed = sum(1 for result in results if not result.passed)
        logger.info(f"Contrast: {len(results) - failed} passed, {failed} failed")
        return results

    # --- registry-driven rules ----------------------------------------

    async def _run_rule(
        self, registry: ValidatorRegistry[ElementValidator], label: str, element: Optional[ElementRef], name: str
    ) -> Optional[CheckResult]:
        validator = registry.resolve(label)
        if validator is None:
            return None
        if element is None:
            return CheckResult.fail(f"{name}: element not found for {registry.kind} '{label}'")
        passed = await validator.check(self.session, element)
        verdict = "meets" if passed else "fails"
        return CheckResult(passed, f"{name}: {verdict} {registry.kind} '{label}' ({validator.description})")

    async def check_cues(self, target: Target, cue_types: Sequence[str], minimum: int) -> CheckResult:
        """Element shows at least *minimum* of *cue_types*; no single cue is required."""
        name = _describe(target)
        element = await self._resolve(target)
        if element is None:
            return CheckResult.fail(f"{name}: element not found for cue check")
        count = await self.cues.count_cues(self.session, element, cue_types)
        return CheckResult(
            count >= minimum,
            f"{name}: {count} of {len(cue_types)} cues ({', '.join(cue_types)}), need {minimum}",
            count,
        )

    async def check_state(self, target: Target, state: str) -> Optional[CheckResult]:
        """Put the element into *state* (hover, focus, active) and validate its styling."""
        if self.states.resolve(state) is None:
            return None
        element = await self._resolve(target)
        if element is not None:
            key = state.strip().lower()
            if key == "hover":
                await self.session.hover(element)
            elif key == "focus":
                await self.session.focus(element)
            elif key == "active":
                await self.session.click(element)
            await self._settle()
        return await self._run_rule(self.states, state, element, _describe(target))

    async def apply_preference(self, preference: str, setting: Setting) -> bool:
        applied = await self.preferences.apply(self.session, preference, setting)
        if applied:
            await self._settle()
        return applied

    async def check_adaptation(
        self,
        target: Target,
        behaviour: str,
        preference: Optional[str] = None,
        setting: Setting = True,
    ) -> Optional[CheckResult]:
        """Validate an adaptation, optionally after emulating a media preference."""
        if preference is not None:
            await self.apply_preference(preference, setting)
        return await self._run_rule(self.adaptations, behaviour, await self._resolve(target), _describe(target))

    async def check_layout(self, region: Target, element_label: str) -> Optional[CheckResult]:
        return await self._run_rule(self.layout, element_label, await self._resolve(region), _describe(region))

    async def check_spacing(self, region: Target, spacing_type: str) -> Optional[CheckResult]:
        return await self._run_rule(self.spacing, spacing_type, await self._resolve(region), _describe(region))

    async def check_style(self, button: Target, style_element: str) -> Optional[CheckResult]:
        return await self._run_rule(self.styles, style_element, await self._resolve(button), _describe(button))

    async def check_visual_elements(
        self, element_type: str, content_type: str = "", scope: Target = "body"
    ) -> Optional[CheckResult]:
        validator = self.visual.for_content(element_type, content_type)
        if validator is None:
            return None
        root = await self._resolve(scope)
        if root is None:
            return CheckResult.fail(f"{_describe(scope)}: scope not found for {element_type}")
        problems = await validator.violations(self.session, root)
        label = f"{element_type}" + (f" ({content_type})" if content_type else "")
        if problems:
            return CheckResult.fail(f"{label}: {'; '.join(problems)}", len(problems))
        return CheckResult.ok(f"{label}: {validator.description}", 0)

    # --- page level ---------------------------------------------------

    async def check_structure(self) -> List[CheckResult]:
        return await self.structure.run_all()

    async def check_responsive(self, viewport: ViewportSize) -> List[CheckResult]:
        return await self.responsive.check_viewport(viewport)

    async def collect_performance(self, budget_ms: Optional[int] = None) -> PerformanceMetrics:
        return await self.performance.collect(budget_ms)

    async def check_performance(
        self,
        lcp_ms: float = LCP_GOOD_MS,
        fid_ms: float = FID_GOOD_MS,
        cls: float = CLS_GOOD,
    ) -> List[CheckResult]:
        """Compare collected vitals to budgets; metrics the page never reported pass with a note."""
        metrics = await self.collect_performance()
        results = []
        for label, value, budget in (("LCP", metrics.lcp, lcp_ms), ("FID", metrics.fid, fid_ms)):
            if value is None:
                results.append(CheckResult.ok(f"{label}: not observed within budget"))
            else:
                results.append(CheckResult(value <= budget, f"{label}: {value:.0f}ms (budget {budget:.0f}ms)", value))
        results.append(CheckResult(metrics.cls <= cls, f"CLS: {metrics.cls:.3f} (budget {cls})", metrics.cls))
        return results
