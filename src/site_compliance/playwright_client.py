"""
In-process Playwright launcher for audits.

One client owns a Playwright driver, one browser and one browser context.
Audit pages are opened from that context so cookies, viewport and default
timeout are shared across the pages of a run.

Usage:
    async with PlaywrightClient(browser_type="firefox") as client:
        page = await client.new_page()
        await page.goto("https://example.com")
"""

import logging
import os
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from site_compliance.env_defaults import env_value
from site_compliance.models import ViewportSize

logger = logging.getLogger(__name__)


def _headless_from_env() -> bool:
    raw = env_value("PLAYWRIGHT_HEADLESS")
    if not raw:
        logger.warning("PLAYWRIGHT_HEADLESS not set, launching headless")
        return True
    return raw.strip().lower() in {"true", "1", "yes", "on"}


class PlaywrightClient:
    """Starts Playwright and tears it down again, in reverse order."""

    def __init__(
        self,
        browser_type: str = "chromium",
        headless: Optional[bool] = None,
        timeout: int = 30000,
        storage_state_path: Optional[str] = None,
        viewport: Optional[ViewportSize] = None,
    ):
        """
        Args:
            browser_type: chromium, firefox or webkit
            headless: None reads PLAYWRIGHT_HEADLESS
            timeout: Default action/navigation timeout of the context (ms)
            storage_state_path: Saved cookies/localStorage to start from
            viewport: Initial viewport of the context
        """
        self.browser_type = browser_type
        self.headless = _headless_from_env() if headless is None else headless
        self.timeout = timeout
        self.storage_state_path = storage_state_path
        self.viewport = viewport

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _context_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if self.viewport is not None:
            options["viewport"] = dict(self.viewport)
        if self.storage_state_path:
            if os.path.exists(self.storage_state_path):
                options["storage_state"] = self.storage_state_path
            else:
                logger.warning(f"storage_state_path does not exist, ignoring: {self.storage_state_path}")
        return options

    async def connect(self):
        """Start the driver, launch the browser and open the audit context."""
        self._playwright = await async_playwright().start()

        launcher = getattr(self._playwright, self.browser_type, None)
        if launcher is None:
            await self.close()
            raise ValueError(f"Unsupported browser type: {self.browser_type}")
        self._browser = await launcher.launch(headless=self.headless)
        logger.info(f"Launched {self.browser_type} (headless={self.headless})")

        self._context = await self._browser.new_context(**self._context_options())
        self._context.set_default_timeout(self.timeout)

    async def new_page(self) -> Page:
        if not self._context:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")
        return await self._context.new_page()

    async def close(self):
        """Close context, browser and driver; safe to call more than once."""
        if self._context:
            await self._context.close()
            self._context = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
