"""Responsive layout checks across standard viewports."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, List, Optional, TypeVar

from site_compliance.browser import BrowserSession
from site_compliance.config import ComplianceConfig, settings
from site_compliance.models import CheckResult, ElementRef, ResponsiveSnapshot, ViewportSize
from site_compliance.scripts import RESPONSIVE_SNAPSHOT

logger = logging.getLogger(__name__)

MOBILE_VIEWPORT: ViewportSize = {"width": 375, "height": 667}
TABLET_VIEWPORT: ViewportSize = {"width": 768, "height": 1024}
DESKTOP_VIEWPORT: ViewportSize = {"width": 1920, "height": 1080}

STANDARD_VIEWPORTS: Dict[str, ViewportSize] = {
    "mobile": MOBILE_VIEWPORT,
    "tablet": TABLET_VIEWPORT,
    "desktop": DESKTOP_VIEWPORT,
}

MIN_TEXT_SIZE_PX = 12

T = TypeVar("T")


def viewport_name(viewport: ViewportSize) -> str:
    """Name of a standard size (mobile, tablet, desktop), else WIDTHxHEIGHT."""
    for name, size in STANDARD_VIEWPORTS.items():
        if size["width"] == viewport["width"] and size["height"] == viewport["height"]:
            return name
    return f"{viewport['width']}x{viewport['height']}"


def parse_viewport(value: str) -> ViewportSize:
    """Accept a standard name or "WIDTHxHEIGHT"."""
    named = STANDARD_VIEWPORTS.get(value.strip().lower())
    if named is not None:
        return ViewportSize(width=named["width"], height=named["height"])
    try:
        width, height = (int(part) for part in value.lower().split("x", 1))
    except ValueError:
        raise ValueError(f"Viewport must be a name ({', '.join(STANDARD_VIEWPORTS)}) or WIDTHxHEIGHT, got {value!r}") from None
    if width <= 0 or height <= 0:
        raise ValueError(f"Viewport dimensions must be positive, got {value!r}")
    return ViewportSize(width=width, height=height)


class ResponsiveChecker:
    """Resizes the viewport and inspects how the page adapts."""

    def __init__(self, session: BrowserSession, config: Optional[ComplianceConfig] = None) -> None:
        self.session = session
        self.config = config or settings

    async def set_viewport(self, viewport: ViewportSize) -> None:
        await self.session.set_viewport_size(viewport["width"], viewport["height"])
        await self.session.wait_for_timeout(self.config.viewport_settle_ms)

    async def check_all_viewports(
        self,
        callback: Callable[[str, ViewportSize], Awaitable[T]],
        viewports: Optional[Dict[str, ViewportSize]] = None,
    ) -> Dict[str, T]:
        """Run *callback* at each viewport, then restore the original size."""
        original = await self.session.viewport_size()
        results: Dict[str, T] = {}
        try:
            for name, viewport in (viewports or STANDARD_VIEWPORTS).items():
                await self.set_viewport(viewport)
                results[name] = await callback(name, viewport)
        finally:
            if original is not None:
                await self.session.set_viewport_size(original["width"], original["height"])
        return results

    async def snapshot(self) -> ResponsiveSnapshot:
        viewport = await self.session.viewport_size() or ViewportSize(width=0, height=0)
        data = await self.session.evaluate(
            RESPONSIVE_SNAPSHOT,
            {"minTextSize": MIN_TEXT_SIZE_PX, "minTouchTarget": self.config.min_touch_target},
        )
        return ResponsiveSnapshot.from_dict(viewport, data or {})

    async def check_viewport(self, viewport: ViewportSize, require_touch_targets: Optional[bool] = None) -> List[CheckResult]:
        """Layout checks at one viewport.

        Touch-target size is only enforced on mobile-width viewports unless
        *require_touch_targets* says otherwise.
        """
        await self.set_viewport(viewport)
        snap = await self.snapshot()
        name = viewport_name(viewport)
        if require_touch_targets is None:
            require_touch_targets = viewport["width"] <= TABLET_VIEWPORT["width"]

        results = [
            CheckResult(
                not snap.has_horizontal_scroll,
                f"{name}: {'horizontal scrollbar present' if snap.has_horizontal_scroll else 'no horizontal scroll'}",
            ),
            CheckResult(
                snap.small_text_count == 0,
                f"{name}: {snap.small_text_count} text elements below {MIN_TEXT_SIZE_PX}px",
                float(snap.small_text_count),
            ),
            CheckResult(
                snap.is_stable and snap.main_width <= viewport["width"],
                f"{name}: main content width {snap.main_width:.0f}px in {viewport['width']}px viewport",
                snap.main_width,
            ),
        ]
        if require_touch_targets:
            small = snap.small_touch_targets
            results.append(CheckResult(
                not small,
                f"{name}: {len(small)} touch targets below {self.config.min_touch_target}px"
                + (f" ({', '.join(small[:5])})" if small else ""),
                float(len(small)),
            ))
        for result in results:
            if not result.passed:
                logger.warning(result.message)
        return results

    async def check_section_adaptation(self, section: ElementRef) -> CheckResult:
        """On narrow viewports a section should stack: block display or column flex."""
        display = await self.session.computed_style(section, "display")
        direction = await self.session.computed_style(section, "flexDirection")
        stacked = display == "block" or (direction or "").startswith("column")
        return CheckResult(stacked, f"Section layout display={display} flex-direction={direction}")
