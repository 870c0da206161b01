"""
sitecheck Check Catalog

Closed, versioned set of named page checks grouped into four categories:
1. Functionality
2. Security
3. SEO
4. UIFeatures

Every check is an async function of a CheckContext. The catalog runs them all
concurrently through one wrapper that turns an exception into the check's
failure value, so a broken check never takes its siblings down.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from sitecheck.schemas.audit import CATEGORY_KEYS, CheckValue
from sitecheck.services.fetcher import CertificateProbe, Fetcher, FetchResponse, check_certificate
from sitecheck.services.link_validator import has_working_images, has_working_links
from sitecheck.services.renderer import PageSession, Unavailable

logger = logging.getLogger(__name__)

CATALOG_VERSION = "1.0"

CATEGORIES = CATEGORY_KEYS


@dataclass
class CheckContext:
    """Everything a check may look at for one audited page."""
    url: str
    html: str
    response: FetchResponse
    fetcher: Fetcher
    load_time_ms: int = 0
    # Task/future resolving to the rendered session; awaited by render checks only
    session_source: Awaitable[PageSession] | None = None
    certificate_probe: CertificateProbe = check_certificate
    link_sample_size: int = 5
    probe_timeout: float | None = None
    page_load_threshold_ms: int = 3000
    soup: BeautifulSoup = field(init=False, repr=False)

    def __post_init__(self):
        self.soup = BeautifulSoup(self.html or "", "lxml")

    async def session(self) -> PageSession:
        if self.session_source is None:
            return Unavailable("No rendered session requested")
        return await asyncio.shield(self.session_source)


CheckFunc = Callable[[CheckContext], Awaitable[CheckValue]]


@dataclass(frozen=True)
class CheckDefinition:
    category: str
    name: str
    func: CheckFunc
    failure_value: CheckValue = False


# =========================================================================
# Functionality
# =========================================================================

async def check_links_working(ctx: CheckContext) -> bool:
    return await has_working_links(
        ctx.soup, ctx.url, ctx.fetcher, limit=ctx.link_sample_size, timeout=ctx.probe_timeout
    )


async def check_images_working(ctx: CheckContext) -> bool:
    return await has_working_images(
        ctx.soup, ctx.url, ctx.fetcher, limit=ctx.link_sample_size, timeout=ctx.probe_timeout
    )


async def check_forms_present(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select("form"))


async def check_forms_valid(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select("form input[name]"))


async def check_page_load(ctx: CheckContext) -> bool:
    return ctx.load_time_ms < ctx.page_load_threshold_ms


async def check_mobile_responsive(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select('meta[name="viewport"][content*="width=device-width"]'))


async def check_navigation_menu(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select("nav, header nav, .nav, .navigation"))


# =========================================================================
# Security
# =========================================================================

async def check_ssl_enabled(ctx: CheckContext) -> bool:
    return ctx.url.startswith("https://")


async def check_ssl_certificate(ctx: CheckContext) -> bool:
    hostname = urlparse(ctx.url).hostname
    if not hostname:
        return False
    return await ctx.certificate_probe(hostname)


async def check_no_mixed_content(ctx: CheckContext) -> bool:
    return "http://" not in ctx.html


async def check_cookies_secure(ctx: CheckContext) -> bool:
    session = await ctx.session()
    if isinstance(session, Unavailable):
        return False
    return any(cookie.get("secure") for cookie in await session.cookies())


async def check_cookies_http_only(ctx: CheckContext) -> bool:
    session = await ctx.session()
    if isinstance(session, Unavailable):
        return False
    return any(cookie.get("httpOnly") for cookie in await session.cookies())


def meta_header_check(header: str) -> CheckFunc:
    """Build a check for a security header injected via <meta http-equiv>."""
    wanted = header.lower()

    async def check(ctx: CheckContext) -> bool:
        session = await ctx.session()
        if isinstance(session, Unavailable):
            return False
        headers = await session.meta_http_equiv()
        return any(name.lower() == wanted and value for name, value in headers.items())

    check.__name__ = f"check_meta_{wanted.replace('-', '_')}"
    return check


# =========================================================================
# SEO
# =========================================================================

async def check_page_title(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select("title"))


async def check_meta_description(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select('meta[name="description"]'))


async def check_meta_keywords(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select('meta[name="keywords"]'))


async def check_open_graph(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select('meta[property^="og:"]'))


async def check_twitter_meta(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select('meta[name^="twitter:"]'))


async def check_robots_txt(ctx: CheckContext) -> bool:
    return await ctx.fetcher.head_ok(urljoin(ctx.url, "/robots.txt"), timeout=ctx.probe_timeout)


async def check_sitemap_xml(ctx: CheckContext) -> bool:
    return await ctx.fetcher.head_ok(urljoin(ctx.url, "/sitemap.xml"), timeout=ctx.probe_timeout)


# =========================================================================
# UI Features
# =========================================================================

async def check_viewport_meta(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select('meta[name="viewport"]'))


async def check_fonts(ctx: CheckContext) -> bool:
    if ctx.soup.select('link[rel="stylesheet"][href*="font"]'):
        return True
    return any("@font-face" in style.get_text() for style in ctx.soup.find_all("style"))


async def check_no_inline_styles(ctx: CheckContext) -> bool:
    return not ctx.soup.select("[style]")


async def check_images_alt(ctx: CheckContext) -> bool:
    return all(img.get("alt") for img in ctx.soup.find_all("img"))


async def check_color_contrast(ctx: CheckContext) -> bool:
    session = await ctx.session()
    if isinstance(session, Unavailable):
        # No evidence of a problem
        return True
    return not await session.has_identical_colors()


async def check_buttons_accessible(ctx: CheckContext) -> bool:
    for button in ctx.soup.find_all("button"):
        if not button.get("aria-label") and not button.get_text(strip=True):
            return False
    return True


async def check_brand_logo(ctx: CheckContext) -> bool:
    return bool(ctx.soup.select('img[alt*="logo" i], img[src*="logo" i], .logo'))


DEFAULT_CHECKS: tuple[CheckDefinition, ...] = (
    CheckDefinition("Functionality", "Links working", check_links_working),
    CheckDefinition("Functionality", "No broken images", check_images_working),
    CheckDefinition("Functionality", "Forms present", check_forms_present),
    CheckDefinition("Functionality", "Forms valid", check_forms_valid),
    CheckDefinition("Functionality", "Page load < 3s", check_page_load),
    CheckDefinition("Functionality", "Mobile responsive", check_mobile_responsive),
    CheckDefinition("Functionality", "Navigation menu", check_navigation_menu),

    CheckDefinition("Security", "SSL enabled", check_ssl_enabled),
    CheckDefinition("Security", "SSL expiry valid", check_ssl_certificate),
    CheckDefinition("Security", "No mixed content", check_no_mixed_content),
    CheckDefinition("Security", "Cookies Secure", check_cookies_secure),
    CheckDefinition("Security", "Cookies HttpOnly", check_cookies_http_only),
    CheckDefinition("Security", "X-Frame-Options", meta_header_check("X-Frame-Options")),
    CheckDefinition("Security", "Content-Security-Policy", meta_header_check("Content-Security-Policy")),

    CheckDefinition("SEO", "Page title", check_page_title),
    CheckDefinition("SEO", "Meta description", check_meta_description),
    CheckDefinition("SEO", "Meta keywords", check_meta_keywords),
    CheckDefinition("SEO", "Open Graph tags", check_open_graph),
    CheckDefinition("SEO", "Twitter meta tags", check_twitter_meta),
    CheckDefinition("SEO", "robots.txt exists", check_robots_txt),
    CheckDefinition("SEO", "sitemap.xml exists", check_sitemap_xml),

    CheckDefinition("UIFeatures", "Responsive meta tag", check_viewport_meta),
    CheckDefinition("UIFeatures", "Fonts load", check_fonts),
    CheckDefinition("UIFeatures", "No inline styles", check_no_inline_styles),
    CheckDefinition("UIFeatures", "Images have alt", check_images_alt),
    CheckDefinition("UIFeatures", "Color contrast", check_color_contrast, failure_value=True),
    CheckDefinition("UIFeatures", "Buttons accessible", check_buttons_accessible),
    CheckDefinition("UIFeatures", "Brand/logo present", check_brand_logo),
)


class CheckCatalog:
    """Runs a fixed list of checks against one page."""

    def __init__(self, checks: tuple[CheckDefinition, ...] | list[CheckDefinition] | None = None):
        self.checks = tuple(DEFAULT_CHECKS if checks is None else checks)

        seen: set[tuple[str, str]] = set()
        for definition in self.checks:
            if definition.category not in CATEGORIES:
                raise ValueError(f"Unknown check category: {definition.category}")
            key = (definition.category, definition.name)
            if key in seen:
                raise ValueError(f"Duplicate check: {definition.category}/{definition.name}")
            seen.add(key)

    async def run(self, ctx: CheckContext) -> dict[str, dict[str, CheckValue]]:
        """Run every check concurrently and group the values by category."""
        logger.info(f"Running {len(self.checks)} checks on {ctx.url} (catalog v{CATALOG_VERSION})")

        values = await asyncio.gather(*(self._run_check(definition, ctx) for definition in self.checks))

        results: dict[str, dict[str, CheckValue]] = {category: {} for category in CATEGORIES}
        for definition, value in zip(self.checks, values):
            results[definition.category][definition.name] = value

        failed = sum(1 for value in values if value is False)
        logger.info(f"Checks complete for {ctx.url}: {len(values) - failed} passed, {failed} failed")
        return results

    async def _run_check(self, definition: CheckDefinition, ctx: CheckContext) -> CheckValue:
        try:
            return await definition.func(ctx)
        except Exception as e:
            logger.error(f"Check '{definition.category}/{definition.name}' raised for {ctx.url}: {e}")
            return definition.failure_value
