"""
Pytest configuration and fixtures for sitecheck tests.
"""
import inspect
import os
from typing import Any, Callable
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Never launch a real browser in tests
os.environ["RENDERER_ENABLED"] = "false"

from sitecheck.config import Settings
from sitecheck.main import create_app
from sitecheck.services.audit_service import AuditService
from sitecheck.services.fetcher import FetchConfig, Fetcher
from sitecheck.services.renderer import BrowserConfig, PageRenderer


# ============================================================================
# Fake network
# ============================================================================

class FakeSite:
    """
    In-memory website served through httpx.MockTransport.

    Routes map an absolute URL to either (status, body, headers) or a
    callable taking the request and returning (or awaiting to) a Response.
    Unknown URLs answer with default_status.
    """

    def __init__(self, default_status: int = 404):
        self.routes: dict[str, Any] = {}
        self.default_status = default_status
        self.requests: list[httpx.Request] = []

    def add(self, url: str, status: int = 200, body: str = "", headers: dict | None = None):
        self.routes[url] = (status, body, headers or {})

    def route(self, url: str, handler: Callable):
        self.routes[url] = handler

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        route = self.routes.get(url, self.routes.get(url.rstrip("/")))
        if route is None:
            return httpx.Response(self.default_status)
        if callable(route):
            result = route(request)
            if inspect.isawaitable(result):
                result = await result
            return result
        status, body, headers = route
        return httpx.Response(status, text=body, headers=headers)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requested(self, method: str | None = None) -> list[str]:
        return [
            str(request.url)
            for request in self.requests
            if method is None or request.method == method
        ]


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest_asyncio.fixture
async def fetcher(site):
    async with Fetcher(FetchConfig(), transport=site.transport()) as client:
        yield client


# ============================================================================
# Service fixtures
# ============================================================================

@pytest.fixture
def disabled_renderer() -> PageRenderer:
    return PageRenderer(BrowserConfig(enabled=False))


@pytest.fixture
def cert_probe() -> AsyncMock:
    return AsyncMock(return_value=True)


@pytest.fixture
def audit_service(site, disabled_renderer, cert_probe) -> AuditService:
    return AuditService(
        renderer=disabled_renderer,
        transport=site.transport(),
        certificate_probe=cert_probe,
    )


# ============================================================================
# API fixtures
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    return Settings(RENDERER_ENABLED=False)


@pytest.fixture
def app(test_settings, audit_service):
    return create_app(test_settings, audit_service=audit_service)


@pytest_asyncio.fixture
async def async_client(app):
    """Async HTTP client against the ASGI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
