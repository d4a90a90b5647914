"""Value types shared by the compliance engine.

Everything here is immutable once built: snapshots, boxes and identities
describe one element at one instant and must be re-captured after any
interaction (hover, click, resize) because the rendered state can change.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, TypedDict

# Opaque handle to a node in the live document. In a Playwright session this
# is an ElementHandle; the engine only borrows it for the duration of a check.
ElementRef = Any

TRANSPARENT = "rgba(0, 0, 0, 0)"


class ViewportSize(TypedDict):
    """Viewport size specification."""
    width: int
    height: int


@dataclass(frozen=True)
class BoundingBox:
    """Position and size of one element in viewport pixels."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["BoundingBox"]:
        if not data:
            return None
        return cls(
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
        )


@dataclass(frozen=True)
class StyleSnapshot:
    """Computed style values captured for one element at one instant.

    Missing properties map to ``None`` ("unknown"), never to an error.
    """
    values: Mapping[str, Optional[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, prop: str, default: Optional[str] = None) -> Optional[str]:
        value = self.values.get(prop)
        return default if value in (None, "") else value

    def __getitem__(self, prop: str) -> Optional[str]:
        return self.values.get(prop)

    def __contains__(self, prop: object) -> bool:
        return prop in self.values


@dataclass(frozen=True)
class ElementIdentity:
    """Composite key used to recognise "the same" element across focus steps.

    This is a heuristic over DOM properties, not a strict identity: two
    distinct elements with the same tag, role, type, id, label prefix and
    text prefix collide (false "already visited"), and an element whose
    text re-renders between steps looks new (false "unvisited").
    """
    tag: str
    role: str = "no-role"
    input_type: str = "no-type"
    dom_id: str = "no-id"
    aria_label: str = "no-label"
    text: str = ""

    ARIA_LABEL_LIMIT = 20
    TEXT_LIMIT = 30

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["ElementIdentity"]:
        if not data:
            return None
        return cls(
            tag=str(data.get("tag") or "").lower(),
            role=data.get("role") or "no-role",
            input_type=data.get("type") or "no-type",
            dom_id=data.get("id") or "no-id",
            aria_label=(data.get("ariaLabel") or "no-label")[: cls.ARIA_LABEL_LIMIT],
            text=(data.get("text") or "").strip()[: cls.TEXT_LIMIT],
        )

    @property
    def is_document_root(self) -> bool:
        return self.tag in ("body", "html")

    @property
    def key(self) -> str:
        return f"{self.tag}-{self.role}-{self.input_type}-{self.dom_id}-{self.aria_label}-{self.text}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one leaf validation."""
    passed: bool
    message: str
    measured: Optional[float] = None

    def __bool__(self) -> bool:
        return self.passed

    @classmethod
    def ok(cls, message: str, measured: Optional[float] = None) -> "CheckResult":
        return cls(True, message, measured)

    @classmethod
    def fail(cls, message: str, measured: Optional[float] = None) -> "CheckResult":
        return cls(False, message, measured)


class StopReason(str, Enum):
    """Why a tab-order traversal ended."""
    EMPTY = "empty"
    CYCLE_COMPLETE = "cycle-complete"
    STUCK = "stuck"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class TabOrderReport:
    """Result of one tab-order traversal."""
    expected_count: int
    visited: List[ElementIdentity]
    steps: int
    stop_reason: StopReason
    score: float
    threshold: float
    stuck_at: Optional[ElementIdentity] = None

    @property
    def distinct_count(self) -> int:
        return len(self.visited)

    @property
    def trapped(self) -> bool:
        return self.stop_reason is StopReason.STUCK

    @property
    def no_trap(self) -> bool:
        return not self.trapped

    @property
    def passed(self) -> bool:
        return self.stop_reason is StopReason.EMPTY or self.score >= self.threshold

    def summary(self) -> str:
        if self.stop_reason is StopReason.EMPTY:
            return "No focusable elements; tab order check passes vacuously"
        text = (
            f"Tab order check: visited {self.distinct_count} of {self.expected_count} "
            f"elements (score: {self.score:.2f}, threshold: {self.threshold:.2f}, "
            f"stopped: {self.stop_reason.value} after {self.steps} steps)"
        )
        if self.stuck_at is not None:
            text += f"; stuck at {self.stuck_at}"
        return text


@dataclass(frozen=True)
class PerformanceMetrics:
    """Core Web Vitals for the current page; LCP/FID may be missing."""
    lcp: Optional[float] = None
    fid: Optional[float] = None
    cls: float = 0.0
    timed_out: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], timed_out: bool = False) -> "PerformanceMetrics":
        data = data or {}
        return cls(
            lcp=_optional_float(data.get("lcp")),
            fid=_optional_float(data.get("fid")),
            cls=float(data.get("cls") or 0.0),
            timed_out=timed_out or bool(data.get("timedOut")),
        )

    @property
    def complete(self) -> bool:
        return self.lcp is not None and self.fid is not None


@dataclass(frozen=True)
class NavigationTiming:
    """Navigation and paint timings in milliseconds."""
    ttfb: Optional[float] = None
    fcp: Optional[float] = None
    dom_content_loaded: Optional[float] = None
    load: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "NavigationTiming":
        data = data or {}
        return cls(
            ttfb=_optional_float(data.get("ttfb")),
            fcp=_optional_float(data.get("fcp")),
            dom_content_loaded=_optional_float(data.get("domContentLoaded")),
            load=_optional_float(data.get("load")),
        )


@dataclass(frozen=True)
class ResponsiveSnapshot:
    """Layout facts for the current viewport."""
    viewport: ViewportSize
    has_horizontal_scroll: bool
    small_text_count: int
    small_touch_targets: List[str]
    main_width: float

    @classmethod
    def from_dict(cls, viewport: ViewportSize, data: Mapping[str, Any]) -> "ResponsiveSnapshot":
        return cls(
            viewport=viewport,
            has_horizontal_scroll=bool(data.get("hasHorizontalScroll")),
            small_text_count=int(data.get("smallTextCount") or 0),
            small_touch_targets=list(data.get("smallTouchTargets") or []),
            main_width=float(data.get("mainWidth") or 0),
        )

    @property
    def is_stable(self) -> bool:
        return self.main_width > 0


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
