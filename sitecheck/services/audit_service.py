"""
sitecheck Audit Service

Runs one audit end to end:
1. Fetch the page (the only failure that aborts the request)
2. Open a rendered session in the background
3. Run the check catalog, and in parallel the sitemap crawl when requested
4. Assemble an AuditResult

The rendered session is closed on every exit path.
"""

import asyncio
import functools
import logging
import time

import httpx

from sitecheck.core.exceptions import PageFetchError
from sitecheck.schemas.audit import AuditResult, LinkCrawlResult, SitemapSummary
from sitecheck.services.checks import CheckCatalog, CheckContext
from sitecheck.services.fetcher import CertificateProbe, FetchConfig, Fetcher, FetchError, check_certificate
from sitecheck.services.link_crawler import DEFAULT_CONCURRENCY, BoundedLinkCrawler
from sitecheck.services.renderer import PageRenderer, RenderedSession, Unavailable
from sitecheck.services.sitemap import SitemapExtractor

logger = logging.getLogger(__name__)


class AuditService:
    """Audit orchestrator. One instance is shared, all state is per run()."""

    def __init__(
        self,
        fetch_config: FetchConfig | None = None,
        renderer: PageRenderer | None = None,
        catalog: CheckCatalog | None = None,
        link_sample_size: int = 5,
        crawl_concurrency: int = DEFAULT_CONCURRENCY,
        page_load_threshold_ms: int = 3000,
        transport: httpx.AsyncBaseTransport | None = None,
        certificate_probe: CertificateProbe | None = None,
    ):
        self.fetch_config = fetch_config or FetchConfig()
        self.renderer = renderer or PageRenderer()
        self.catalog = catalog or CheckCatalog()
        self.link_sample_size = link_sample_size
        self.crawl_concurrency = crawl_concurrency
        self.page_load_threshold_ms = page_load_threshold_ms
        self._transport = transport
        self.certificate_probe = certificate_probe or functools.partial(
            check_certificate, timeout=self.fetch_config.tls_timeout
        )

    @classmethod
    def from_settings(cls, settings, renderer: PageRenderer | None = None) -> "AuditService":
        return cls(
            fetch_config=settings.fetch_config(),
            renderer=renderer or PageRenderer(settings.browser_config()),
            link_sample_size=settings.LINK_SAMPLE_SIZE,
            crawl_concurrency=settings.CRAWL_CONCURRENCY,
            page_load_threshold_ms=settings.PAGE_LOAD_THRESHOLD_MS,
        )

    def _new_fetcher(self) -> Fetcher:
        return Fetcher(self.fetch_config, transport=self._transport)

    async def run(self, url: str, sitemap_url: str | None = None) -> AuditResult:
        """
        Audit a single page.

        Args:
            url: Absolute http(s) URL of the page
            sitemap_url: Optional sitemap whose URLs are crawled for reachability

        Returns:
            AuditResult

        Raises:
            PageFetchError: if the page itself cannot be fetched
        """
        logger.info(f"Starting audit of {url}" + (f" (sitemap {sitemap_url})" if sitemap_url else ""))

        async with self._new_fetcher() as fetcher:
            start_time = time.perf_counter()
            try:
                response = await fetcher.fetch(url, "GET", timeout=self.fetch_config.page_timeout)
            except FetchError as e:
                logger.error(f"Failed to fetch {url}: {e.message}")
                raise PageFetchError(details=e.message) from e
            load_time_ms = int((time.perf_counter() - start_time) * 1000)
            logger.info(f"Fetched {url} in {load_time_ms}ms (status {response.status})")

            session_task = asyncio.create_task(self.renderer.open(url))
            try:
                ctx = CheckContext(
                    url=url,
                    html=response.body,
                    response=response,
                    fetcher=fetcher,
                    load_time_ms=load_time_ms,
                    session_source=session_task,
                    certificate_probe=self.certificate_probe,
                    link_sample_size=self.link_sample_size,
                    probe_timeout=self.fetch_config.probe_timeout,
                    page_load_threshold_ms=self.page_load_threshold_ms,
                )
                checks, (sitemap, link_crawl) = await asyncio.gather(
                    self.catalog.run(ctx),
                    self._audit_sitemap(fetcher, sitemap_url),
                )

                error = None
                session = await session_task
                if isinstance(session, Unavailable):
                    logger.warning(f"Rendered checks degraded for {url}: {session.reason}")
                    error = f"Error during website analysis: {session.reason}"
            finally:
                await _close_session(session_task)

        logger.info(f"Audit of {url} complete")
        return AuditResult(
            functionality=checks["Functionality"],
            security=checks["Security"],
            seo=checks["SEO"],
            ui_features=checks["UIFeatures"],
            sitemap=sitemap,
            link_crawl=link_crawl,
            error=error,
        )

    async def _audit_sitemap(
        self, fetcher: Fetcher, sitemap_url: str | None
    ) -> tuple[SitemapSummary | None, LinkCrawlResult | None]:
        if not sitemap_url:
            return None, None

        extractor = SitemapExtractor(fetcher, timeout=self.fetch_config.page_timeout)
        parsed = await extractor.parse(sitemap_url)

        crawler = BoundedLinkCrawler(
            fetcher,
            concurrency=self.crawl_concurrency,
            timeout=self.fetch_config.page_timeout,
        )
        link_crawl = await crawler.crawl(parsed.urls)
        return SitemapSummary.from_parse_result(parsed), link_crawl


async def _close_session(task: asyncio.Task):
    """Cancel a pending session open, or close the session it produced."""
    if not task.done():
        task.cancel()
        await asyncio.wait([task])
    if task.cancelled():
        return
    session = task.result()
    if isinstance(session, RenderedSession):
        await session.close()
