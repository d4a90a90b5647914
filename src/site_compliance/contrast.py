"""WCAG 2.x relative luminance and contrast ratio.

Colours are the strings browsers return from ``getComputedStyle`` such as
``rgb(51, 51, 51)`` or ``rgba(0, 0, 0, 0)``. Only the first three numeric
components are used; alpha is ignored, so a transparent background reads as
black and produces a degenerate low ratio instead of an error.
"""
from __future__ import annotations

import re
from typing import Optional, Tuple

from site_compliance.styles import parse_px

AA_NORMAL_TEXT = 4.5
AA_LARGE_TEXT = 3.0
LARGE_TEXT_PX = 24.0
LARGE_BOLD_TEXT_PX = 18.66
BOLD_WEIGHT = 700

_CHANNEL_RE = re.compile(r"\d+(?:\.\d+)?")


def parse_rgb(color: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """First three numeric components of a colour string, or None."""
    if not color:
        return None
    parts = _CHANNEL_RE.findall(color)
    if len(parts) < 3:
        return None
    r, g, b = (min(float(p), 255.0) for p in parts[:3])
    return r, g, b


def _linearize(channel: float) -> float:
    v = channel / 255.0
    return v / 12.92 if v <= 0.03928 else ((v + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Optional[str]) -> float:
    """Relative luminance in [0, 1]; 0 for anything that does not parse."""
    rgb = parse_rgb(color)
    if rgb is None:
        return 0.0
    r, g, b = (_linearize(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(foreground: Optional[str], background: Optional[str]) -> float:
    """Contrast ratio in [1, 21]. Unparseable input yields 1.0."""
    if parse_rgb(foreground) is None or parse_rgb(background) is None:
        return 1.0
    first = relative_luminance(foreground)
    second = relative_luminance(background)
    lighter, darker = max(first, second), min(first, second)
    return (lighter + 0.05) / (darker + 0.05)


def is_large_text(font_size: Optional[str], font_weight: Optional[str] = None) -> bool:
    """WCAG "large text": 18pt (24px), or 14pt (~18.66px) bold."""
    size = parse_px(font_size)
    if size >= LARGE_TEXT_PX:
        return True
    weight = (font_weight or "").strip().lower()
    bold = weight in ("bold", "bolder") or parse_px(weight) >= BOLD_WEIGHT
    return bold and size >= LARGE_BOLD_TEXT_PX


def required_ratio(font_size: Optional[str], font_weight: Optional[str] = None,
                   normal: float = AA_NORMAL_TEXT, large: float = AA_LARGE_TEXT) -> float:
    return large if is_large_text(font_size, font_weight) else normal


def meets_ratio(foreground: Optional[str], background: Optional[str], minimum: float = AA_NORMAL_TEXT) -> bool:
    return contrast_ratio(foreground, background) >= minimum
