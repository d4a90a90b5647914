"""Shared fixtures: a scripted in-memory browser session for unit tests."""
import inspect
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from site_compliance.browser import ToolError
from site_compliance.config import ComplianceConfig
from site_compliance.models import BoundingBox

BODY = {"tag": "body"}


def pytest_configure(config):
    config.addinivalue_line("markers", "browser: needs a real Chromium (skipped when unavailable)")


def identity(tag: str, dom_id: Optional[str] = None, text: str = "", selectors=(), **extra) -> Dict[str, Any]:
    """Focused-element payload as returned by the focused_identity script."""
    data = {"tag": tag, "id": dom_id, "text": text, "_selectors": set(selectors)}
    data.update(extra)
    return data


@dataclass
class FakeElement:
    tag: str = "div"
    styles: Dict[str, str] = field(default_factory=dict)
    attrs: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = ""
    visible: bool = True
    box: Optional[BoundingBox] = None
    children: Dict[str, List["FakeElement"]] = field(default_factory=dict)
    natural: Dict[str, float] = field(default_factory=lambda: {"width": 200, "height": 200})
    keyboard: Dict[str, bool] = field(default_factory=dict)
    hover_styles: Dict[str, str] = field(default_factory=dict)
    focus_styles: Dict[str, str] = field(default_factory=dict)
    active_styles: Dict[str, str] = field(default_factory=dict)
    detached: bool = False


class FakeSession:
    """Implements the BrowserSession surface from canned data.

    ``tab_sequence`` lists the focused-element payloads after each Tab press;
    it repeats when ``cycle`` is true and sticks on the last entry otherwise.
    Page scripts are answered from ``scripts`` by script name (a value or a
    callable taking the script argument).
    """

    def __init__(
        self,
        elements: Optional[Dict[str, List[FakeElement]]] = None,
        scripts: Optional[Dict[str, Any]] = None,
        tab_sequence: Optional[List[Optional[Dict[str, Any]]]] = None,
        cycle: bool = True,
        viewport: Optional[Dict[str, int]] = None,
    ) -> None:
        self.elements = elements or {}
        self.scripts = scripts or {}
        self.tab_sequence = tab_sequence or []
        self.cycle = cycle
        self.viewport = viewport or {"width": 1280, "height": 720}
        self.bad_selectors: set = set()
        self.focus_index = -1
        self.keys: List[str] = []
        self.waits: List[float] = []
        self.clicks: List[Any] = []
        self.hovered: List[FakeElement] = []
        self.focused: List[FakeElement] = []
        self.media: List[Dict[str, Any]] = []
        self.viewport_history: List[Dict[str, int]] = []
        self.evaluated: List[str] = []

    # focus model
    def current_focus(self) -> Optional[Dict[str, Any]]:
        if self.focus_index < 0 or not self.tab_sequence:
            return BODY
        if self.cycle:
            return self.tab_sequence[self.focus_index % len(self.tab_sequence)]
        return self.tab_sequence[min(self.focus_index, len(self.tab_sequence) - 1)]

    async def evaluate(self, script, arg=None):
        name = getattr(script, "name", "inline")
        self.evaluated.append(name)
        if name == "focused_identity":
            return self.current_focus()
        if name == "blur_active":
            self.focus_index = -1
            return None
        if name == "active_matches":
            if arg in self.bad_selectors:
                raise ToolError(name="evaluate", payload={"script": name}, message="invalid selector")
            current = self.current_focus() or {}
            return arg in current.get("_selectors", ())
        if name not in self.scripts:
            raise AssertionError(f"unexpected page script: {name}")
        answer = self.scripts[name]
        result = answer(arg) if callable(answer) else answer
        if inspect.isawaitable(result):
            result = await result
        return result

    async def evaluate_on(self, ref: FakeElement, script, arg=None):
        name = getattr(script, "name", "inline")
        if ref.detached:
            return None
        if name == "computed_style":
            return ref.styles.get(arg)
        if name == "has_descendant":
            return bool(ref.children.get(arg))
        if name == "tag_name":
            return ref.tag
        if name == "natural_size":
            return dict(ref.natural)
        if name == "keyboard_profile":
            return dict(ref.keyboard)
        raise AssertionError(f"unexpected element script: {name}")

    async def query(self, selector: str, within: Optional[FakeElement] = None) -> List[FakeElement]:
        if selector in self.bad_selectors:
            raise ToolError(name="query", payload={"selector": selector}, message="invalid selector")
        source = within.children if within is not None else self.elements
        return list(source.get(selector, []))

    async def computed_style(self, ref: FakeElement, prop: str) -> Optional[str]:
        return None if ref.detached else ref.styles.get(prop)

    async def bounding_box(self, ref: FakeElement) -> Optional[BoundingBox]:
        return None if ref.detached else ref.box

    async def text_content(self, ref: FakeElement) -> Optional[str]:
        return None if ref.detached else ref.text

    async def get_attribute(self, ref: FakeElement, name: str) -> Optional[str]:
        return None if ref.detached else ref.attrs.get(name)

    async def is_visible(self, ref: FakeElement) -> bool:
        return ref.visible and not ref.detached

    async def press_key(self, key: str) -> None:
        self.keys.append(key)
        if key == "Tab":
            self.focus_index += 1

    async def hover(self, ref: FakeElement) -> None:
        self.hovered.append(ref)
        ref.styles.update(ref.hover_styles)

    async def click(self, ref: FakeElement, position=None) -> None:
        self.clicks.append((ref, position))
        ref.styles.update(ref.active_styles)

    async def focus(self, ref: FakeElement) -> None:
        self.focused.append(ref)
        ref.styles.update(ref.focus_styles)

    async def set_viewport_size(self, width: int, height: int) -> None:
        self.viewport = {"width": width, "height": height}
        self.viewport_history.append(dict(self.viewport))

    async def viewport_size(self):
        return dict(self.viewport) if self.viewport else None

    async def emulate_media(self, **media: Any) -> None:
        self.media.append(media)

    async def wait_for_timeout(self, ms: float) -> None:
        self.waits.append(ms)


@pytest.fixture
def config() -> ComplianceConfig:
    """Defaults with zero settle delays."""
    return ComplianceConfig(
        tab_settle_ms=0,
        focus_reset_ms=0,
        interaction_settle_ms=0,
        viewport_settle_ms=0,
    )


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
    def factory(**kwargs: Any) -> FakeSession:
        kwargs.setdefault("elements", {"body": [FakeElement(tag="body")]})
        return FakeSession(**kwargs)
    return factory
