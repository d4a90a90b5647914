"""Browser preference emulation (reduced motion, colour scheme, contrast)."""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

from site_compliance.browser import BrowserSession
from site_compliance.registries.base import ValidatorRegistry

logger = logging.getLogger(__name__)

Setting = Union[str, bool]

ENABLED_VALUES = {"enabled", "on", "true", "1", "yes", "reduce", "more", "active"}


def is_enabled(setting: Setting) -> bool:
    if isinstance(setting, bool):
        return setting
    return setting.strip().lower() in ENABLED_VALUES


class PreferenceHandler(ABC):
    """Applies one media preference to the session."""

    media_feature: str = ""

    @abstractmethod
    async def apply(self, session: BrowserSession, setting: Setting) -> None:
        pass


class ReducedMotionPreference(PreferenceHandler):
    media_feature = "prefers-reduced-motion"

    async def apply(self, session: BrowserSession, setting: Setting) -> None:
        value = "reduce" if is_enabled(setting) else "no-preference"
        logger.debug(f"Emulating reduced_motion={value}")
        await session.emulate_media(reduced_motion=value)


class ColorSchemePreference(PreferenceHandler):
    media_feature = "prefers-color-scheme"

    SCHEMES = ("light", "dark", "no-preference")

    async def apply(self, session: BrowserSession, setting: Setting) -> None:
        value = str(setting).strip().lower()
        if value not in self.SCHEMES:
            raise ValueError(f"Unsupported color scheme: {setting!r} (expected one of {', '.join(self.SCHEMES)})")
        logger.debug(f"Emulating color_scheme={value}")
        await session.emulate_media(color_scheme=value)


class ContrastPreference(PreferenceHandler):
    media_feature = "prefers-contrast"

    async def apply(self, session: BrowserSession, setting: Setting) -> None:
        value = "active" if is_enabled(setting) else "none"
        logger.debug(f"Emulating forced_colors={value}")
        await session.emulate_media(forced_colors=value)


class PreferenceRegistry(ValidatorRegistry[PreferenceHandler]):
    kind = "browser preference"

    def __init__(self, unknown_policy: Optional[str] = None) -> None:
        super().__init__(
            [
                ("prefers-reduced-motion", ReducedMotionPreference()),
                ("prefers-color-scheme", ColorSchemePreference()),
                ("prefers-contrast", ContrastPreference()),
            ],
            unknown_policy=unknown_policy,
        )

    async def apply(self, session: BrowserSession, preference: str, setting: Setting) -> bool:
        """Apply *preference*; False when it was skipped under the warn policy."""
        handler = self.resolve(preference)
        if handler is None:
            return False
        await handler.apply(session, setting)
        return True
