"""Reduced-motion adaptation validators."""

import asyncio
from typing import Optional

from site_compliance.browser import BrowserSession
from site_compliance.models import ElementRef
from site_compliance.registries.base import ElementValidator, ValidatorRegistry
from site_compliance.scripts import TAG_NAME
from site_compliance.styles import is_none_value, parse_px


def _is_zero_duration(value: Optional[str]) -> bool:
    # "0s" and "0s, 0s" (one entry per animated property)
    return value is not None and all(parse_px(part) == 0 for part in value.split(","))


def _read_as_none(value: Optional[str]) -> bool:
    # a failed read (None) is not evidence that the effect is off
    return value is not None and is_none_value(value)


class AnimationsMinimal(ElementValidator):
    description = "animations removed or paused, or transitions instant"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        duration, play_state, transition = await asyncio.gather(
            session.computed_style(element, "animationDuration"),
            session.computed_style(element, "animationPlayState"),
            session.computed_style(element, "transitionDuration"),
        )
        return _is_zero_duration(duration) or play_state == "paused" or _is_zero_duration(transition)


class NoAutoAdvance(ElementValidator):
    description = "does not advance on its own (no autoplay attribute or class)"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        tag, autoplay, classes = await asyncio.gather(
            session.evaluate_on(element, TAG_NAME),
            session.get_attribute(element, "data-autoplay"),
            session.get_attribute(element, "class"),
        )
        # missing attributes only mean "absent" while the element is readable
        if tag is None:
            return False
        return autoplay is None and "autoplay" not in (classes or "").split()


class EffectsDisabled(ElementValidator):
    description = "no transform or filter effect"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        transform, filter_ = await asyncio.gather(
            session.computed_style(element, "transform"),
            session.computed_style(element, "filter"),
        )
        return _read_as_none(transform) and _read_as_none(filter_)


class TransitionsSimplified(ElementValidator):
    description = "instant or absent transitions"

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        duration, prop = await asyncio.gather(
            session.computed_style(element, "transitionDuration"),
            session.computed_style(element, "transitionProperty"),
        )
        return _is_zero_duration(duration) or _read_as_none(prop)


class AdaptationRegistry(ValidatorRegistry[ElementValidator]):
    kind = "adaptation behaviour"

    def __init__(self, unknown_policy: Optional[str] = None) -> None:
        super().__init__(
            [
                ("disabled/minimal", AnimationsMinimal()),
                ("no auto-advance", NoAutoAdvance()),
                ("disabled", EffectsDisabled()),
                ("simplified", TransitionsSimplified()),
            ],
            unknown_policy=unknown_policy,
        )
