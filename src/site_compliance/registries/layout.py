"""Layout, spacing and style validators for a page region and its buttons.

Layout and spacing validators receive the region element (typically the
page footer). Style validators receive one button inside it, such as a
social media link.
"""

import asyncio
import logging
from typing import Optional, Sequence

from site_compliance.browser import BrowserSession
from site_compliance.models import ElementRef
from site_compliance.registries.base import ElementValidator, ValidatorRegistry
from site_compliance.styles import is_transparent, parse_px

logger = logging.getLogger(__name__)

SOCIAL_SECTION_SELECTOR = ".social-media-links, .social-links"
NAVIGATION_LINK_SELECTOR = 'nav a, [role="navigation"] a, .footer-links a'
COPYRIGHT_SELECTOR = ".copyright-text, .copyright"
BUTTON_ICON_SELECTOR = "svg, img"

MIN_HORIZONTAL_SPACING_PX = 20
MIN_VERTICAL_PADDING_PX = 15
MIN_REGION_HEIGHT_PX = 60


async def _first(session: BrowserSession, selector: str, within: ElementRef) -> Optional[ElementRef]:
    matches = await session.query(selector, within=within)
    return matches[0] if matches else None


class SocialMediaLayout(ElementValidator):
    description = "social media section is visible"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        section = await _first(session, SOCIAL_SECTION_SELECTOR, element)
        return section is not None and await session.is_visible(section)


class NavigationLinksLayout(ElementValidator):
    """Region has visible navigation links, optionally with the given texts."""

    description = "navigation links are present and visible"

    def __init__(self, expected_links: Sequence[str] = ()) -> None:
        self.expected_links = tuple(expected_links)

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        links = await session.query(NAVIGATION_LINK_SELECTOR, within=element)
        visible_texts = []
        for link in links:
            if await session.is_visible(link):
                visible_texts.append((await session.text_content(link) or "").strip())
        if not visible_texts:
            return False
        missing = [text for text in self.expected_links if text not in visible_texts]
        if missing:
            logger.debug(f"Missing navigation links: {missing}")
        return not missing


class CopyrightTextLayout(ElementValidator):
    description = "copyright text is present and non-empty"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        copyright_el = await _first(session, COPYRIGHT_SELECTOR, element)
        if copyright_el is None:
            return False
        text = await session.text_content(copyright_el)
        return bool(text and text.strip())


class HorizontalSpacing(ElementValidator):
    description = f"gap or left padding above {MIN_HORIZONTAL_SPACING_PX}px"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        gap, padding_left = await asyncio.gather(
            session.computed_style(element, "gap"),
            session.computed_style(element, "paddingLeft"),
        )
        return parse_px(gap) > MIN_HORIZONTAL_SPACING_PX or parse_px(padding_left) > MIN_HORIZONTAL_SPACING_PX


class VerticalSpacing(ElementValidator):
    description = f"top padding above {MIN_VERTICAL_PADDING_PX}px"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        return parse_px(await session.computed_style(element, "paddingTop")) > MIN_VERTICAL_PADDING_PX


class OverallSpacing(ElementValidator):
    description = f"region taller than {MIN_REGION_HEIGHT_PX}px (not cramped)"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        box = await session.bounding_box(element)
        return box is not None and box.height > MIN_REGION_HEIGHT_PX


class RoundedBackgroundStyle(ElementValidator):
    description = "button background is rounded (50% or radius above 10px)"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        radius = await session.computed_style(element, "borderRadius") or ""
        return "50%" in radius or parse_px(radius) > 10


class IconStyle(ElementValidator):
    description = "button icon is visible"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        icon = await _first(session, BUTTON_ICON_SELECTOR, element)
        return icon is not None and await session.is_visible(icon)


class ConsistentDesignStyle(ElementValidator):
    description = "button background and icon colour are both set"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        icon = await _first(session, BUTTON_ICON_SELECTOR, element)
        if icon is None:
            return False
        background, icon_color = await asyncio.gather(
            session.computed_style(element, "backgroundColor"),
            session.computed_style(icon, "color"),
        )
        return not is_transparent(background) and not is_transparent(icon_color)


class LayoutRegistry(ValidatorRegistry[ElementValidator]):
    kind = "layout element"

    def __init__(self, unknown_policy: Optional[str] = None, expected_links: Sequence[str] = ()) -> None:
        super().__init__(
            [
                ("social media", SocialMediaLayout()),
                ("navigation links", NavigationLinksLayout(expected_links)),
                ("copyright text", CopyrightTextLayout()),
            ],
            unknown_policy=unknown_policy,
        )


class SpacingRegistry(ValidatorRegistry[ElementValidator]):
    kind = "spacing type"

    def __init__(self, unknown_policy: Optional[str] = None) -> None:
        super().__init__(
            [
                ("horizontal", HorizontalSpacing()),
                ("vertical", VerticalSpacing()),
                ("overall", OverallSpacing()),
            ],
            unknown_policy=unknown_policy,
        )


class StyleRegistry(ValidatorRegistry[ElementValidator]):
    kind = "style element"

    def __init__(self, unknown_policy: Optional[str] = None) -> None:
        super().__init__(
            [
                ("background", RoundedBackgroundStyle()),
                ("icon", IconStyle()),
                ("design", ConsistentDesignStyle()),
            ],
            unknown_policy=unknown_policy,
        )
