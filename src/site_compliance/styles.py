"""Computed style and geometry reads for one element."""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Iterable, Optional

from site_compliance.browser import BrowserSession
from site_compliance.models import BoundingBox, ElementRef, StyleSnapshot, TRANSPARENT

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")

# Computed colours come back as rgba(...) with an alpha of 0 for transparent
# backgrounds; both spellings are treated as "no colour".
TRANSPARENT_VALUES = frozenset({TRANSPARENT, "transparent", "rgba(0,0,0,0)"})


def parse_px(value: Optional[str]) -> float:
    """Leading number of a CSS length ("12.5px" -> 12.5); 0 when absent."""
    if not value:
        return 0.0
    match = _NUMBER_RE.search(value)
    return float(match.group()) if match else 0.0


def is_transparent(value: Optional[str]) -> bool:
    return value is None or value.strip() in TRANSPARENT_VALUES


def is_none_value(value: Optional[str]) -> bool:
    """True for an unset or ``none`` CSS value."""
    return value is None or value.strip() in ("", "none")


class StyleAccessor:
    """Reads current computed styles and boxes through a browser session.

    Nothing is cached: every call reflects the element as rendered right now.
    """

    def __init__(self, session: BrowserSession) -> None:
        self.session = session

    async def value(self, element: ElementRef, prop: str) -> Optional[str]:
        value = await self.session.computed_style(element, prop)
        if value is None:
            logger.debug(f"computed style {prop} unavailable")
        return value

    async def snapshot(self, element: ElementRef, props: Iterable[str]) -> StyleSnapshot:
        """Read several properties concurrently as one snapshot."""
        names = list(dict.fromkeys(props))
        values = await asyncio.gather(*(self.session.computed_style(element, name) for name in names))
        return StyleSnapshot(dict(zip(names, values)))

    async def numeric(self, element: ElementRef, prop: str) -> float:
        return parse_px(await self.value(element, prop))

    async def bounding_box(self, element: ElementRef) -> Optional[BoundingBox]:
        return await self.session.bounding_box(element)
