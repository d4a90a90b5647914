"""Keyboard tab-order traversal with cycle and focus-trap detection.

The analyzer presses Tab repeatedly from a neutral starting point and
records which element holds focus after each press. Elements are told
apart by :class:`~site_compliance.models.ElementIdentity`, a heuristic
key; pass a different ``identity_fn`` to change how elements are
recognised.

A traversal stops at the first of:

1. cycle complete: focus is back on the document root (body/html, or
   nothing focused) after more than ``element_count + 2`` presses;
2. stuck: the focused element was first seen fewer than ``stuck_window``
   presses ago while fewer than ``stuck_ledger_limit`` distinct elements
   have been seen, and focus has not passed through the root since;
3. exhaustion: ``min(2 * element_count + 10, max_tab_steps)`` presses.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, List, Optional

from site_compliance.browser import BrowserSession
from site_compliance.config import ComplianceConfig, settings
from site_compliance.models import ElementIdentity, StopReason, TabOrderReport
from site_compliance.scripts import ACTIVE_MATCHES, BLUR_ACTIVE, COUNT_FOCUSABLE, FOCUSED_IDENTITY

logger = logging.getLogger(__name__)

DEFAULT_FOCUSABLE_SELECTOR = (
    'a[href], button, input:not([type="hidden"]), select, textarea, '
    '[tabindex]:not([tabindex="-1"])'
)

IdentityFn = Callable[[BrowserSession], Awaitable[Optional[ElementIdentity]]]


async def focused_identity(session: BrowserSession) -> Optional[ElementIdentity]:
    """Identity of the element that currently holds focus (None if nothing does)."""
    return ElementIdentity.from_dict(await session.evaluate(FOCUSED_IDENTITY))


def coverage_threshold(expected_count: int) -> float:
    """Minimum visited/expected ratio: 0.80 shrinking by 0.01 per element, floored at 0.70."""
    return max(0.70, 0.80 - 0.01 * expected_count)


class TabOrderAnalyzer:
    """Drives Tab presses through a browser session and scores coverage."""

    def __init__(
        self,
        session: BrowserSession,
        config: Optional[ComplianceConfig] = None,
        identity_fn: Optional[IdentityFn] = None,
    ) -> None:
        self.session = session
        self.config = config or settings
        self.identity_fn = identity_fn or focused_identity

    def max_steps(self, element_count: int) -> int:
        return min(2 * element_count + 10, self.config.max_tab_steps)

    @staticmethod
    def cycle_threshold(element_count: int) -> int:
        return element_count + 2

    async def count_focusable(self, selector: str = DEFAULT_FOCUSABLE_SELECTOR) -> int:
        """Number of enabled, rendered elements matching *selector*."""
        return int(await self.session.evaluate(COUNT_FOCUSABLE, selector) or 0)

    async def reset_focus(self) -> None:
        """Park focus on the document: click body at its top-left corner, then blur."""
        bodies = await self.session.query("body")
        if bodies:
            await self.session.click(bodies[0], position={"x": 0, "y": 0})
        await self.session.wait_for_timeout(self.config.focus_reset_ms)
        await self.session.evaluate(BLUR_ACTIVE)

    async def _press_tab(self) -> Optional[ElementIdentity]:
        await self.session.press_key("Tab")
        await self.session.wait_for_timeout(self.config.tab_settle_ms)
        return await self.identity_fn(self.session)

    def _is_stuck(
        self,
        identity: ElementIdentity,
        step: int,
        ledger: Dict[ElementIdentity, int],
        root_steps: List[int],
    ) -> bool:
        first_seen = ledger.get(identity)
        if first_seen is None:
            return False
        if any(first_seen < root_step < step for root_step in root_steps):
            return False
        return step - first_seen < self.config.stuck_window and len(ledger) < self.config.stuck_ledger_limit

    async def analyze(self, expected_count: int) -> TabOrderReport:
        """Traverse the page with Tab and report coverage of *expected_count* elements."""
        threshold = coverage_threshold(expected_count)
        if expected_count <= 0:
            logger.info("No focusable elements; skipping tab traversal")
            return TabOrderReport(
                expected_count=0, visited=[], steps=0,
                stop_reason=StopReason.EMPTY, score=1.0, threshold=threshold,
            )

        await self.reset_focus()

        ledger: Dict[ElementIdentity, int] = {}
        root_steps: List[int] = []
        max_steps = self.max_steps(expected_count)
        cycle_after = self.cycle_threshold(expected_count)
        stop_reason = StopReason.EXHAUSTED
        stuck_at: Optional[ElementIdentity] = None
        step = 0

        for step in range(1, max_steps + 1):
            identity = await self._press_tab()
            if identity is None or identity.is_document_root:
                if step > cycle_after:
                    stop_reason = StopReason.CYCLE_COMPLETE
                    break
                root_steps.append(step)
                continue
            if self._is_stuck(identity, step, ledger, root_steps):
                logger.warning(f"Tab navigation stuck at element: {identity}")
                stop_reason = StopReason.STUCK
                stuck_at = identity
                break
            ledger.setdefault(identity, step)

        visited = sorted(ledger, key=ledger.__getitem__)
        report = TabOrderReport(
            expected_count=expected_count,
            visited=visited,
            steps=step,
            stop_reason=stop_reason,
            score=len(visited) / expected_count,
            threshold=threshold,
            stuck_at=stuck_at,
        )
        logger.info(report.summary())
        return report

    async def has_no_keyboard_trap(self, expected_count: int) -> bool:
        return (await self.analyze(expected_count)).no_trap

    async def check_logical_tab_order(self, expected_count: int) -> bool:
        return (await self.analyze(expected_count)).passed

    async def press_tab_until(self, selector: str, max_tries: Optional[int] = None) -> bool:
        """Tab until an element matching *selector* has focus.

        Gives up after ``max_tries`` presses (default ``max_tab_steps``) or
        when focus wraps back to the document root after the first presses.
        """
        max_tries = self.config.max_tab_steps if max_tries is None else max_tries
        await self.reset_focus()
        for attempt in range(max_tries):
            await self.session.press_key("Tab")
            await self.session.wait_for_timeout(self.config.tab_settle_ms)
            if await self.session.evaluate(ACTIVE_MATCHES, selector):
                return True
            if attempt > 1:
                identity = await self.identity_fn(self.session)
                if identity is None or identity.is_document_root:
                    logger.debug(f"Focus wrapped to document before reaching {selector}")
                    break
        return False
