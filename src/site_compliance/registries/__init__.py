"""
Validator registries.

Each rule family is a keyed registry: a human label (as written in a test
scenario) maps to a validator object. Lookups ignore case.

Registries:
- CueRegistry: color, icon, text, underline, shape, message
- StateRegistry: hover, focus, active
- AdaptationRegistry: disabled/minimal, no auto-advance, disabled, simplified
- LayoutRegistry / SpacingRegistry / StyleRegistry: page region rules
- PreferenceRegistry: prefers-reduced-motion, prefers-color-scheme, prefers-contrast
- VisualElementRegistry: content images, decorative, svg icons, complex images

Usage:
    from site_compliance.registries import StateRegistry

    states = StateRegistry()
    ok = await states.resolve("Hover").check(session, element)
"""

from .base import ElementValidator, UnknownRuleError, UnknownRulePolicy, ValidatorRegistry
from .adaptation import AdaptationRegistry
from .cues import CueRegistry
from .layout import LayoutRegistry, SpacingRegistry, StyleRegistry
from .preferences import PreferenceHandler, PreferenceRegistry
from .states import StateRegistry
from .visual import VisualElementRegistry, VisualElementValidator

__all__ = [
    'ElementValidator',
    'UnknownRuleError',
    'UnknownRulePolicy',
    'ValidatorRegistry',
    'AdaptationRegistry',
    'CueRegistry',
    'LayoutRegistry',
    'SpacingRegistry',
    'StyleRegistry',
    'PreferenceHandler',
    'PreferenceRegistry',
    'StateRegistry',
    'VisualElementRegistry',
    'VisualElementValidator',
]
