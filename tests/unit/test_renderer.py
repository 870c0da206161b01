"""
Unit tests for the Rendered-Page Adapter.

Playwright is replaced by mocks; no browser is launched.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sitecheck.services.renderer import (
    SANDBOX_ARGS,
    BrowserConfig,
    PageRenderer,
    RenderedSession,
    Unavailable,
)


def mock_playwright_stack(launch_error=None, goto_error=None):
    """Build async_playwright() -> playwright -> browser -> context -> page mocks."""
    page = MagicMock()
    page.goto = AsyncMock(side_effect=goto_error)
    page.evaluate = AsyncMock(return_value={})

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.cookies = AsyncMock(return_value=[{"name": "sid", "secure": True, "httpOnly": False}])
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser, side_effect=launch_error)
    playwright.stop = AsyncMock()

    factory = MagicMock()
    factory.return_value.start = AsyncMock(return_value=playwright)

    return factory, playwright, browser, context, page


class TestBrowserConfig:
    """Test BrowserConfig defaults."""

    def test_default_config(self):
        """Test defaults match the documented launch settings."""
        config = BrowserConfig()

        assert config.enabled is True
        assert config.executable_path is None
        assert config.headless is True
        assert config.navigation_timeout_ms == 90000
        assert config.wait_until == "networkidle"
        assert config.ignore_https_errors is True
        assert "--no-sandbox" in config.args
        assert config.args == SANDBOX_ARGS


class TestPageRenderer:
    """Test PageRenderer.open and session."""

    @pytest.mark.asyncio
    async def test_disabled_renderer_is_unavailable(self):
        """Test a disabled renderer never touches Playwright."""
        renderer = PageRenderer(BrowserConfig(enabled=False))

        with patch("sitecheck.services.renderer.async_playwright") as factory:
            session = await renderer.open("https://good.example/")

        assert isinstance(session, Unavailable)
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_launch_failure_is_unavailable(self):
        """Test a launch failure yields Unavailable and stops Playwright."""
        factory, playwright, _, _, _ = mock_playwright_stack(
            launch_error=Exception("Executable doesn't exist at /usr/bin/chromium")
        )

        with patch("sitecheck.services.renderer.async_playwright", factory):
            session = await PageRenderer().open("https://good.example/")

        assert isinstance(session, Unavailable)
        assert "Executable doesn't exist" in session.reason
        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_navigation_failure_releases_browser(self):
        """Test a navigation failure closes everything already opened."""
        factory, playwright, browser, context, _ = mock_playwright_stack(
            goto_error=TimeoutError("Navigation timeout of 90000 ms exceeded")
        )

        with patch("sitecheck.services.renderer.async_playwright", factory):
            session = await PageRenderer().open("https://good.example/")

        assert isinstance(session, Unavailable)
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_successful_open(self):
        """Test a successful navigation yields a RenderedSession."""
        factory, playwright, browser, context, page = mock_playwright_stack()
        config = BrowserConfig(executable_path="/usr/bin/chromium", navigation_timeout_ms=1000)

        with patch("sitecheck.services.renderer.async_playwright", factory):
            session = await PageRenderer(config).open("https://good.example/")

        assert isinstance(session, RenderedSession)
        _, launch_kwargs = playwright.chromium.launch.call_args
        assert launch_kwargs["executable_path"] == "/usr/bin/chromium"
        assert launch_kwargs["args"] == list(SANDBOX_ARGS)
        page.goto.assert_awaited_once_with("https://good.example/", wait_until="networkidle", timeout=1000)

        assert await session.cookies() == [{"name": "sid", "secure": True, "httpOnly": False}]

        await session.close()
        await session.close()
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_context_manager_closes(self):
        """Test the scoped session is closed on exit, even after an error."""
        factory, playwright, browser, _, _ = mock_playwright_stack()

        with patch("sitecheck.services.renderer.async_playwright", factory):
            with pytest.raises(RuntimeError):
                async with PageRenderer().session("https://good.example/") as session:
                    assert isinstance(session, RenderedSession)
                    raise RuntimeError("check blew up")

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()


class TestRenderedSession:
    """Test page evaluation helpers."""

    @pytest.mark.asyncio
    async def test_meta_http_equiv_and_colors(self):
        """Test helpers return what the page scripts evaluate to."""
        page = MagicMock()
        page.evaluate = AsyncMock(side_effect=[{"X-Frame-Options": "DENY"}, 1])
        session = RenderedSession("https://good.example/", page, MagicMock(), MagicMock(), MagicMock())

        assert await session.meta_http_equiv() == {"X-Frame-Options": "DENY"}
        assert await session.has_identical_colors() is True
