"""ARIA renderer — loads pages in Playwright and serializes their accessibility tree."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ariasnap.models.config import SnapshotConfig

logger = logging.getLogger(__name__)


class RenderFailure(Exception):
    """Navigation, timeout, or selector failure while rendering a page."""


class AriaRenderer:
    """Shares one Chromium per run; every render gets its own browser context.

    Usage::

        async with AriaRenderer(config) as renderer:
            text = await renderer.render_region(url, "body", 10000)
    """

    def __init__(self, config: SnapshotConfig):
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> "AriaRenderer":
        self._playwright = await async_playwright().start()
        logger.debug("Launching Chromium (headless=%s)...", self.config.headless)
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def render_region(
        self,
        url: str,
        selector: Optional[str] = None,
        settle_delay_ms: Optional[int] = None,
    ) -> str:
        """Return the ARIA snapshot of the first element matching ``selector``.

        ``selector=None`` snapshots the whole body. The settle delay is a
        fixed wait after the load event, not a stability check.
        """
        if self._browser is None:
            raise RuntimeError("AriaRenderer must be entered before rendering")

        selector = selector or "body"
        delay = self.config.settle_delay_ms if settle_delay_ms is None else settle_delay_ms
        viewport = self.config.viewport

        context = await self._browser.new_context(
            viewport={"width": viewport.width, "height": viewport.height},
        )
        try:
            page = await context.new_page()
            logger.debug("Navigating to %s", url)
            await page.goto(url, wait_until="load", timeout=self.config.navigation_timeout_ms)
            if delay:
                await page.wait_for_timeout(delay)
            locator = page.locator(selector).first
            return await locator.aria_snapshot(timeout=self.config.navigation_timeout_ms)
        except PlaywrightError as e:
            raise RenderFailure(e.message or str(e)) from e
        finally:
            await context.close()
