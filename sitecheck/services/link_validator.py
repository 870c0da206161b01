"""
Sampled link/image validation for a single page.

Only the first few candidates in document order are probed; the page passes
if any one of them answers with a status below 400.
"""
import asyncio
import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from sitecheck.services.fetcher import Fetcher

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 5
SKIP_PREFIXES = ("#", "javascript:")


def _is_skippable(href: str) -> bool:
    if not href:
        return True
    return href.strip().lower().startswith(SKIP_PREFIXES)


def sample_targets(
    soup: BeautifulSoup,
    base_url: str,
    selector: str,
    attribute: str,
    limit: int = DEFAULT_SAMPLE_SIZE,
) -> list[str]:
    """Absolute URLs for the first `limit` matches, minus skippable ones."""
    targets = []
    for element in soup.select(selector)[:limit]:
        value = (element.get(attribute) or "").strip()
        if _is_skippable(value):
            continue
        try:
            targets.append(urljoin(base_url, value))
        except ValueError as e:
            logger.debug(f"Skipping unparseable {attribute} {value!r}: {e}")
    return targets


async def _probe(fetcher: Fetcher, url: str, timeout: float | None) -> bool:
    try:
        status = await fetcher.head_status(url, timeout=timeout)
    except Exception as e:
        logger.debug(f"Probe of {url} failed: {e}")
        return False
    return status is not None and status < 400


async def any_target_working(
    fetcher: Fetcher,
    targets: list[str],
    timeout: float | None = None,
) -> bool:
    if not targets:
        return False
    results = await asyncio.gather(*(_probe(fetcher, url, timeout) for url in targets))
    working = sum(results)
    logger.debug(f"{working}/{len(targets)} sampled targets working")
    return working > 0


async def has_working_links(
    soup: BeautifulSoup,
    base_url: str,
    fetcher: Fetcher,
    limit: int = DEFAULT_SAMPLE_SIZE,
    timeout: float | None = None,
) -> bool:
    targets = sample_targets(soup, base_url, "a[href]", "href", limit)
    return await any_target_working(fetcher, targets, timeout)


async def has_working_images(
    soup: BeautifulSoup,
    base_url: str,
    fetcher: Fetcher,
    limit: int = DEFAULT_SAMPLE_SIZE,
    timeout: float | None = None,
) -> bool:
    targets = sample_targets(soup, base_url, "img[src]", "src", limit)
    return await any_target_working(fetcher, targets, timeout)
