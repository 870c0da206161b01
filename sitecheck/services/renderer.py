"""
sitecheck Rendered-Page Adapter

Headless Chromium session (Playwright) for checks that need post-render state:
cookies, injected <meta http-equiv> headers and computed styles.

Opening a session never raises. A launch or navigation failure yields an
Unavailable value that rendering-dependent checks branch on explicitly.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Union

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

logger = logging.getLogger(__name__)

SANDBOX_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-software-rasterizer",
    "--disable-accelerated-2d-canvas",
)

META_HTTP_EQUIV_SCRIPT = """
() => Object.fromEntries(
    Array.from(document.getElementsByTagName('meta'))
        .filter(m => m.httpEquiv)
        .map(m => [m.httpEquiv, m.content])
)
"""

IDENTICAL_COLORS_SCRIPT = """
() => {
    const elements = document.querySelectorAll('body, body *');
    for (const el of elements) {
        const style = window.getComputedStyle(el);
        if (style.color === style.backgroundColor) return true;
    }
    return false;
}
"""


@dataclass(frozen=True)
class BrowserConfig:
    """Browser launch settings, resolved once at startup."""
    enabled: bool = True
    executable_path: str | None = None
    headless: bool = True
    args: tuple[str, ...] = SANDBOX_ARGS
    navigation_timeout_ms: int = 90000
    wait_until: str = "networkidle"  # load, domcontentloaded, networkidle
    ignore_https_errors: bool = True


@dataclass(frozen=True)
class Unavailable:
    """No rendered page could be produced for this audit."""
    reason: str


class RenderedSession:
    """A navigated browser page plus the resources that own it."""

    def __init__(
        self,
        url: str,
        page: Page,
        context: BrowserContext,
        browser: Browser,
        playwright: Playwright,
    ):
        self.url = url
        self._page = page
        self._context = context
        self._browser = browser
        self._playwright = playwright
        self._closed = False

    async def cookies(self) -> list[dict]:
        return await self._context.cookies()

    async def meta_http_equiv(self) -> dict[str, str]:
        return await self._page.evaluate(META_HTTP_EQUIV_SCRIPT)

    async def has_identical_colors(self) -> bool:
        return bool(await self._page.evaluate(IDENTICAL_COLORS_SCRIPT))

    async def close(self):
        if self._closed:
            return
        self._closed = True
        await _release(self._context, self._browser, self._playwright)
        logger.info(f"Browser session for {self.url} closed")


PageSession = Union[RenderedSession, Unavailable]


async def _release(context, browser, playwright):
    """Close whatever part of the browser stack was acquired."""
    for resource, closer in ((context, "close"), (browser, "close"), (playwright, "stop")):
        if resource is None:
            continue
        try:
            await getattr(resource, closer)()
        except Exception as e:
            logger.warning(f"Error releasing browser resource: {e}")


class PageRenderer:
    """Opens one rendered-page session per audit."""

    def __init__(self, config: BrowserConfig | None = None):
        self.config = config or BrowserConfig()

    async def open(self, url: str) -> PageSession:
        """
        Launch a browser and navigate to url.

        Returns:
            RenderedSession on success, Unavailable on any launch or
            navigation failure. The caller owns the session and must close it.
        """
        if not self.config.enabled:
            return Unavailable("Headless browser disabled")

        playwright = browser = context = None
        try:
            logger.info("Launching headless browser")
            playwright = await async_playwright().start()
            browser = await playwright.chromium.launch(
                headless=self.config.headless,
                executable_path=self.config.executable_path,
                args=list(self.config.args),
            )
            context = await browser.new_context(ignore_https_errors=self.config.ignore_https_errors)
            page = await context.new_page()
            page.set_default_navigation_timeout(self.config.navigation_timeout_ms)

            logger.info(f"Navigating to {url}...")
            await page.goto(
                url,
                wait_until=self.config.wait_until,
                timeout=self.config.navigation_timeout_ms,
            )
            logger.info("Page loaded successfully")
            return RenderedSession(url, page, context, browser, playwright)

        except Exception as e:
            logger.warning(f"Rendered page unavailable for {url}: {e}")
            await _release(context, browser, playwright)
            return Unavailable(str(e) or type(e).__name__)

        except BaseException:
            # Cancelled mid-launch: release before propagating
            await _release(context, browser, playwright)
            raise

    @asynccontextmanager
    async def session(self, url: str) -> AsyncIterator[PageSession]:
        """Scoped session that is always closed on exit."""
        session = await self.open(url)
        try:
            yield session
        finally:
            if isinstance(session, RenderedSession):
                await session.close()
