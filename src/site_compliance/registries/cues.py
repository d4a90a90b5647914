"""Visual cue validators: does an element signal itself by colour, icon, text, ...?"""

import asyncio
import logging
from typing import Iterable, Optional

from site_compliance.browser import BrowserSession
from site_compliance.models import ElementRef
from site_compliance.registries.base import ElementValidator, ValidatorRegistry
from site_compliance.scripts import HAS_DESCENDANT, TAG_NAME
from site_compliance.styles import is_transparent, parse_px

logger = logging.getLogger(__name__)

BLACK = "rgb(0, 0, 0)"
ICON_SELECTOR = 'svg, .icon, [class*="icon"]'


class ColorCue(ElementValidator):
    description = "text colour differs from default black"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        color = await session.computed_style(element, "color")
        return color is not None and color != BLACK and not is_transparent(color)


class IconCue(ElementValidator):
    description = "contains an icon (svg or icon class)"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        return bool(await session.evaluate_on(element, HAS_DESCENDANT, ICON_SELECTOR))


class TextCue(ElementValidator):
    description = "has visible text"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        text = await session.text_content(element)
        return bool(text and text.strip())


class UnderlineCue(ElementValidator):
    description = "underlined or bottom-bordered"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        decoration, border_bottom = await asyncio.gather(
            session.computed_style(element, "textDecoration"),
            session.computed_style(element, "borderBottomWidth"),
        )
        return "underline" in (decoration or "") or parse_px(border_bottom) > 0


class ShapeCue(ElementValidator):
    description = "has a rounded or bordered shape, or is a button"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        radius, border, tag = await asyncio.gather(
            session.computed_style(element, "borderRadius"),
            session.computed_style(element, "borderWidth"),
            session.evaluate_on(element, TAG_NAME),
        )
        return parse_px(radius) > 0 or parse_px(border) > 0 or tag == "button"


class MessageCue(ElementValidator):
    description = "carries an accessible message (aria-label, title or text)"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        label, title, text = await asyncio.gather(
            session.get_attribute(element, "aria-label"),
            session.get_attribute(element, "title"),
            session.text_content(element),
        )
        return bool(label or title or (text and text.strip()))


class CueRegistry(ValidatorRegistry[ElementValidator]):
    kind = "cue type"

    def __init__(self, unknown_policy: Optional[str] = None) -> None:
        super().__init__(
            [
                ("color", ColorCue()),
                ("icon", IconCue()),
                ("text", TextCue()),
                ("underline", UnderlineCue()),
                ("shape", ShapeCue()),
                ("message", MessageCue()),
            ],
            unknown_policy=unknown_policy,
        )

    async def count_cues(self, session: BrowserSession, element: ElementRef, cue_types: Iterable[str]) -> int:
        """How many of *cue_types* the element shows; unknown labels follow the policy."""
        count = 0
        for cue_type in cue_types:
            validator = self.resolve(cue_type)
            if validator is None:
                continue
            if await validator.check(session, element):
                count += 1
            else:
                logger.debug(f"Cue '{cue_type}' not present")
        return count

    async def has_minimum_cues(
        self, session: BrowserSession, element: ElementRef, cue_types: Iterable[str], minimum: int
    ) -> bool:
        return await self.count_cues(session, element, cue_types) >= minimum
