"""Browser session used by the compliance engine.

:class:`BrowserSession` is the narrow surface the engine talks to; the
:class:`PlaywrightSession` implementation wraps a Playwright ``Page``.
Element reads (style, box, text, attribute, visibility) treat a Playwright
error as transient and return ``None``; everything else wraps the failure
in :class:`ToolError` and raises.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Protocol, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from site_compliance.config import ComplianceConfig, settings
from site_compliance.models import BoundingBox, ElementRef, ViewportSize
from site_compliance.playwright_client import PlaywrightClient
from site_compliance.scripts import COMPUTED_STYLE, PageScript

logger = logging.getLogger(__name__)

Script = Union[PageScript, str]


@dataclass
class ToolError(Exception):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


def _script_name(script: Script) -> str:
    return script.name if isinstance(script, PageScript) else "inline"


class BrowserSession(Protocol):
    """Operations the engine needs from a live page."""

    async def evaluate(self, script: Script, arg: Any = None) -> Any: ...

    async def evaluate_on(self, ref: ElementRef, script: Script, arg: Any = None) -> Any: ...

    async def query(self, selector: str, within: Optional[ElementRef] = None) -> List[ElementRef]: ...

    async def computed_style(self, ref: ElementRef, prop: str) -> Optional[str]: ...

    async def bounding_box(self, ref: ElementRef) -> Optional[BoundingBox]: ...

    async def text_content(self, ref: ElementRef) -> Optional[str]: ...

    async def get_attribute(self, ref: ElementRef, name: str) -> Optional[str]: ...

    async def is_visible(self, ref: ElementRef) -> bool: ...

    async def press_key(self, key: str) -> None: ...

    async def hover(self, ref: ElementRef) -> None: ...

    async def click(self, ref: ElementRef, position: Optional[Mapping[str, float]] = None) -> None: ...

    async def focus(self, ref: ElementRef) -> None: ...

    async def set_viewport_size(self, width: int, height: int) -> None: ...

    async def viewport_size(self) -> Optional[ViewportSize]: ...

    async def emulate_media(self, **media: Any) -> None: ...

    async def wait_for_timeout(self, ms: float) -> None: ...


class PlaywrightSession:
    """:class:`BrowserSession` over a Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    async def goto(self, url: str, wait_until: str = "networkidle", timeout: int = 30000) -> Dict[str, Any]:
        """Navigate to URL and return url, title and status.

        "networkidle" can time out on pages with long-polling or analytics
        beacons, so a timeout retries once with "domcontentloaded".
        """
        try:
            response = await self._page.goto(url, wait_until=wait_until, timeout=timeout)
        except PlaywrightTimeout as exc:
            if wait_until != "networkidle":
                raise ToolError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc))
            try:
                response = await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout)
            except PlaywrightError:
                raise ToolError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc))
        except PlaywrightError as exc:
            raise ToolError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc))
        return {
            "url": self._page.url,
            "title": await self._page.title(),
            "status": response.status if response else None,
        }

    async def title(self) -> str:
        return await self._page.title()

    async def evaluate(self, script: Script, arg: Any = None) -> Any:
        """Execute a page-context function."""
        try:
            return await self._page.evaluate(str(script), arg)
        except PlaywrightError as exc:
            raise ToolError(name="evaluate", payload={"script": _script_name(script)}, message=str(exc))

    async def evaluate_on(self, ref: ElementRef, script: Script, arg: Any = None) -> Any:
        """Execute a page-context function against one element; None if it went away."""
        try:
            return await ref.evaluate(str(script), arg)
        except PlaywrightError as exc:
            logger.debug(f"evaluate_on({_script_name(script)}) failed: {exc}")
            return None

    async def query(self, selector: str, within: Optional[ElementRef] = None) -> List[ElementRef]:
        """All element handles matching selector, optionally inside *within*."""
        root = within if within is not None else self._page
        try:
            return await root.query_selector_all(selector)
        except PlaywrightError as exc:
            raise ToolError(name="query", payload={"selector": selector}, message=str(exc))

    async def computed_style(self, ref: ElementRef, prop: str) -> Optional[str]:
        return await self.evaluate_on(ref, COMPUTED_STYLE, prop)

    async def bounding_box(self, ref: ElementRef) -> Optional[BoundingBox]:
        try:
            return BoundingBox.from_dict(await ref.bounding_box())
        except PlaywrightError as exc:
            logger.debug(f"bounding_box failed: {exc}")
            return None

    async def text_content(self, ref: ElementRef) -> Optional[str]:
        try:
            return await ref.text_content()
        except PlaywrightError as exc:
            logger.debug(f"text_content failed: {exc}")
            return None

    async def get_attribute(self, ref: ElementRef, name: str) -> Optional[str]:
        try:
            return await ref.get_attribute(name)
        except PlaywrightError as exc:
            logger.debug(f"get_attribute({name}) failed: {exc}")
            return None

    async def is_visible(self, ref: ElementRef) -> bool:
        try:
            return await ref.is_visible()
        except PlaywrightError as exc:
            logger.debug(f"is_visible failed: {exc}")
            return False

    async def press_key(self, key: str) -> None:
        try:
            await self._page.keyboard.press(key)
        except PlaywrightError as exc:
            raise ToolError(name="press_key", payload={"key": key}, message=str(exc))

    async def hover(self, ref: ElementRef) -> None:
        try:
            await ref.hover()
        except PlaywrightError as exc:
            raise ToolError(name="hover", payload={}, message=str(exc))

    async def click(self, ref: ElementRef, position: Optional[Mapping[str, float]] = None) -> None:
        try:
            if position is not None:
                await ref.click(position=dict(position), force=True)
            else:
                await ref.click()
        except PlaywrightError as exc:
            raise ToolError(name="click", payload={"position": dict(position or {})}, message=str(exc))

    async def focus(self, ref: ElementRef) -> None:
        try:
            await ref.focus()
        except PlaywrightError as exc:
            raise ToolError(name="focus", payload={}, message=str(exc))

    async def set_viewport_size(self, width: int, height: int) -> None:
        try:
            await self._page.set_viewport_size({"width": width, "height": height})
        except PlaywrightError as exc:
            raise ToolError(name="set_viewport_size", payload={"width": width, "height": height}, message=str(exc))

    async def viewport_size(self) -> Optional[ViewportSize]:
        size = self._page.viewport_size
        if size is None:
            return None
        return ViewportSize(width=size["width"], height=size["height"])

    async def emulate_media(self, **media: Any) -> None:
        try:
            await self._page.emulate_media(**media)
        except PlaywrightError as exc:
            raise ToolError(name="emulate_media", payload=dict(media), message=str(exc))

    async def wait_for_timeout(self, ms: float) -> None:
        await self._page.wait_for_timeout(ms)


@asynccontextmanager
async def browser_session(
    config: Optional[ComplianceConfig] = None,
    viewport: Optional[ViewportSize] = None,
) -> AsyncIterator[PlaywrightSession]:
    """Yield a PlaywrightSession on a fresh page, closing the browser afterwards."""
    config = config or settings
    client = PlaywrightClient(
        browser_type=config.playwright_browser,
        headless=config.playwright_headless,
        timeout=config.playwright_timeout_ms,
        viewport=viewport,
    )
    async with client:
        yield PlaywrightSession(await client.new_page())
