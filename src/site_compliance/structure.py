"""Page-level structural accessibility checks.

These look at the document as a whole rather than at one element: language,
title, headings, landmarks, text alternatives, link wording, media, motion
and live regions.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence

from site_compliance.browser import BrowserSession
from site_compliance.models import CheckResult
from site_compliance.scripts import (
    ARIA_LIVE_COUNT,
    HTML_LANG,
    IMAGES_MISSING_ALT,
    LANDMARK_COUNTS,
    LINK_TEXTS,
    MEDIA_FEATURES,
    MOTION_PROFILE,
    PAGE_TITLE,
    POSITIVE_TABINDEX_ORDER,
    VISIBLE_HEADING_LEVELS,
)

logger = logging.getLogger(__name__)

GENERIC_LINK_TEXTS = frozenset({"click here", "read more", "learn more", "go", "view", "here", "link"})
DEFAULT_LANDMARKS = ("main",)
_LANG_RE = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]{2,8})*$")


def heading_hierarchy_problems(levels: Sequence[int]) -> List[str]:
    """Skipped levels (h2 -> h4) and a missing h1, in document order."""
    problems = []
    if 1 not in levels:
        problems.append("no visible h1")
    previous = 0
    for level in levels:
        if previous and level > previous + 1:
            problems.append(f"h{previous} followed by h{level}")
        previous = level
    return problems


def positive_tabindex_in_order(tab_indexes: Sequence[int]) -> bool:
    """Explicit tabindex values never decrease in visual reading order."""
    return all(later >= earlier for earlier, later in zip(tab_indexes, tab_indexes[1:]))


class StructureChecker:
    def __init__(self, session: BrowserSession) -> None:
        self.session = session

    async def check_html_lang(self) -> CheckResult:
        lang = await self.session.evaluate(HTML_LANG)
        if not lang:
            return CheckResult.fail("<html> has no lang attribute")
        if not _LANG_RE.match(lang):
            return CheckResult.fail(f"<html lang={lang!r}> is not a valid language tag")
        return CheckResult.ok(f"<html lang={lang!r}>")

    async def check_page_title(self) -> CheckResult:
        title = (await self.session.evaluate(PAGE_TITLE) or "").strip()
        if not title or "untitled" in title.lower():
            return CheckResult.fail(f"Page title {title!r} is not descriptive")
        return CheckResult.ok(f"Page title {title!r}")

    async def check_heading_hierarchy(self) -> CheckResult:
        levels = list(await self.session.evaluate(VISIBLE_HEADING_LEVELS) or [])
        problems = heading_hierarchy_problems(levels)
        if problems:
            return CheckResult.fail(f"Heading hierarchy broken: {'; '.join(problems)}")
        return CheckResult.ok(f"Heading hierarchy valid across {len(levels)} headings")

    async def check_landmarks(self, required: Iterable[str] = DEFAULT_LANDMARKS) -> CheckResult:
        counts = await self.session.evaluate(LANDMARK_COUNTS) or {}
        missing = [name for name in required if not counts.get(name)]
        if missing:
            return CheckResult.fail(f"Missing landmarks: {', '.join(missing)}")
        return CheckResult.ok(f"Landmarks present: {counts}")

    async def check_image_alt(self) -> CheckResult:
        missing = list(await self.session.evaluate(IMAGES_MISSING_ALT) or [])
        if missing:
            return CheckResult.fail(f"{len(missing)} images without alt text: {', '.join(missing[:5])}", len(missing))
        return CheckResult.ok("All visible images have alt text", 0)

    async def check_descriptive_links(self) -> CheckResult:
        texts = list(await self.session.evaluate(LINK_TEXTS) or [])
        vague = [text or "(empty)" for text in texts if not text or text in GENERIC_LINK_TEXTS]
        if vague:
            return CheckResult.fail(f"{len(vague)} links with non-descriptive text: {sorted(set(vague))}", len(vague))
        return CheckResult.ok(f"{len(texts)} links have descriptive text", 0)

    async def check_media(self, media_type: str = "video") -> CheckResult:
        if media_type not in ("video", "audio"):
            raise ValueError(f"media_type must be 'video' or 'audio', got {media_type!r}")
        media = list(await self.session.evaluate(MEDIA_FEATURES, media_type) or [])
        no_controls = sum(1 for item in media if not item.get("controls"))
        no_captions = sum(1 for item in media if not item.get("captions"))
        if no_controls or no_captions:
            return CheckResult.fail(
                f"{media_type}: {no_controls} without controls, {no_captions} without captions"
            )
        return CheckResult.ok(f"{len(media)} {media_type} elements have controls and captions")

    async def check_motion(self) -> CheckResult:
        profile = await self.session.evaluate(MOTION_PROFILE) or {}
        problems = []
        if profile.get("autoAdvance"):
            problems.append("auto-advancing content")
        if profile.get("parallax"):
            problems.append("parallax effects")
        if profile.get("aggressiveAnimations"):
            problems.append("animations or transitions shorter than 0.3s")
        if problems:
            return CheckResult.fail(f"Motion concerns: {', '.join(problems)}")
        return CheckResult.ok("No auto-advance, parallax or abrupt animation")

    async def check_flashing(self) -> CheckResult:
        profile = await self.session.evaluate(MOTION_PROFILE) or {}
        if profile.get("flashingClasses") or profile.get("rapidAnimations"):
            return CheckResult.fail("Possible flashing content (blink/flash classes or animations under 0.2s)")
        return CheckResult.ok("No flashing content detected")

    async def check_aria_live(self) -> CheckResult:
        count = int(await self.session.evaluate(ARIA_LIVE_COUNT) or 0)
        if count == 0:
            return CheckResult.fail("No aria-live regions for dynamic updates", 0)
        return CheckResult.ok(f"{count} aria-live regions", count)

    async def check_tabindex_order(self) -> CheckResult:
        indexes = list(await self.session.evaluate(POSITIVE_TABINDEX_ORDER) or [])
        if not positive_tabindex_in_order(indexes):
            return CheckResult.fail(f"tabindex values out of visual order: {indexes}")
        return CheckResult.ok("tabindex values follow visual order")

    async def run_all(self) -> List[CheckResult]:
        results = [
            await self.check_html_lang(),
            await self.check_page_title(),
            await self.check_heading_hierarchy(),
            await self.check_landmarks(),
            await self.check_image_alt(),
            await self.check_descriptive_links(),
            await self.check_media("video"),
            await self.check_media("audio"),
            await self.check_motion(),
            await self.check_flashing(),
            await self.check_tabindex_order(),
        ]
        failed = [r for r in results if not r.passed]
        logger.info(f"Structure checks: {len(results) - len(failed)}/{len(results)} passed")
        return results
