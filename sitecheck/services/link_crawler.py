"""
sitecheck Link Crawler

Checks the reachability of a list of URLs (usually the <loc> entries of a
sitemap) with a hard ceiling on in-flight requests:
- Fixed pool of workers draining one queue
- Results stored by input position, so order always matches the input
- Per-URL failures recorded, never raised
"""

import asyncio
import logging
from typing import Callable

from sitecheck.schemas.audit import LinkCrawlResult, LinkOutcome
from sitecheck.services.fetcher import Fetcher, FetchError

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5

ProgressCallback = Callable[[int, int], None]


class BoundedLinkCrawler:
    """GETs every URL once with at most `concurrency` requests in flight."""

    def __init__(
        self,
        fetcher: Fetcher,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float | None = None,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.fetcher = fetcher
        self.concurrency = concurrency
        self.timeout = timeout

    async def crawl(self, urls: list[str], progress: ProgressCallback | None = None) -> LinkCrawlResult:
        """
        Crawl URLs through a worker pool.

        Args:
            urls: URLs to check, in the order they should be reported
            progress: Optional callback invoked as progress(tested, total) after each URL

        Returns:
            LinkCrawlResult with one outcome per input URL
        """
        total = len(urls)
        if total == 0:
            return LinkCrawlResult(total_links=0, tested_links=0, per_link=[])

        queue: asyncio.Queue = asyncio.Queue()
        for index, url in enumerate(urls):
            queue.put_nowait((index, url))

        slots: list[LinkOutcome | None] = [None] * total
        tested = 0

        async def worker():
            nonlocal tested
            while True:
                try:
                    index, url = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    slots[index] = await self.check_url(url)
                    tested += 1
                    if progress is not None:
                        progress(tested, total)
                finally:
                    queue.task_done()

        worker_count = min(self.concurrency, total)
        logger.info(f"Crawling {total} URLs with {worker_count} workers")
        workers = [asyncio.create_task(worker()) for _ in range(worker_count)]
        try:
            await asyncio.gather(*workers)
        finally:
            for task in workers:
                if not task.done():
                    task.cancel()

        per_link = [outcome for outcome in slots if outcome is not None]
        reachable = sum(1 for outcome in per_link if outcome.reachable)
        logger.info(f"Crawl complete: {reachable}/{total} URLs reachable")
        return LinkCrawlResult(total_links=total, tested_links=tested, per_link=per_link)

    async def crawl_in_batches(
        self,
        urls: list[str],
        batch_size: int | None = None,
        progress: ProgressCallback | None = None,
    ) -> LinkCrawlResult:
        """
        Crawl URLs in sequential fixed-size batches.

        Each batch runs concurrently and must finish before the next one starts.
        """
        batch_size = batch_size or self.concurrency
        total = len(urls)
        per_link: list[LinkOutcome] = []

        for start in range(0, total, batch_size):
            batch = urls[start:start + batch_size]
            outcomes = await asyncio.gather(*(self.check_url(url) for url in batch))
            per_link.extend(outcomes)
            if progress is not None:
                progress(len(per_link), total)
            logger.debug(f"Batch {start // batch_size + 1}: {len(per_link)}/{total} URLs tested")

        return LinkCrawlResult(total_links=total, tested_links=len(per_link), per_link=per_link)

    async def check_url(self, url: str) -> LinkOutcome:
        """Fetch one URL and describe the outcome."""
        try:
            response = await self.fetcher.fetch(url, "GET", timeout=self.timeout)
        except FetchError as e:
            return self._failure(url, e.message, e.status)
        except Exception as e:
            logger.error(f"Unexpected error checking {url}: {e}")
            return self._failure(url, str(e), None)

        return LinkOutcome(
            url=url,
            http_status=response.status,
            reachable=True,
            https_valid=response.status == 200,
        )

    @staticmethod
    def _failure(url: str, message: str, status: int | None) -> LinkOutcome:
        return LinkOutcome(
            url=url,
            http_status=status,
            reachable=False,
            https_valid=url.startswith("https"),
            error_message=message,
        )
