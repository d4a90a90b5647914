"""Interaction state validators (hover, focus, active).

These read the element's styles as they are now; the caller is expected to
have put the element into the state first (see the orchestrator).
"""

import asyncio
from typing import Optional

from site_compliance.browser import BrowserSession
from site_compliance.models import ElementRef
from site_compliance.registries.base import ElementValidator, ValidatorRegistry
from site_compliance.styles import is_none_value, is_transparent


class HoverState(ElementValidator):
    description = "pointer cursor, background or border colour on hover"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        cursor, background, border = await asyncio.gather(
            session.computed_style(element, "cursor"),
            session.computed_style(element, "backgroundColor"),
            session.computed_style(element, "borderColor"),
        )
        return cursor == "pointer" or not is_transparent(background) or not is_transparent(border)


class FocusState(ElementValidator):
    description = "visible outline, box shadow or border when focused"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        outline, shadow, border = await asyncio.gather(
            session.computed_style(element, "outlineStyle"),
            session.computed_style(element, "boxShadow"),
            session.computed_style(element, "borderColor"),
        )
        return not is_none_value(outline) or not is_none_value(shadow) or not is_transparent(border)


class ActiveState(ElementValidator):
    description = "transform or background change when active"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        transform, background = await asyncio.gather(
            session.computed_style(element, "transform"),
            session.computed_style(element, "backgroundColor"),
        )
        return not is_none_value(transform) or not is_transparent(background)


class StateRegistry(ValidatorRegistry[ElementValidator]):
    kind = "interaction state"

    def __init__(self, unknown_policy: Optional[str] = None) -> None:
        super().__init__(
            [
                ("hover", HoverState()),
                ("focus", FocusState()),
                ("active", ActiveState()),
            ],
            unknown_policy=unknown_policy,
        )
