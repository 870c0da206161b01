"""
Sitemap extraction.

Fetches a sitemap (or sitemap index) and lists the <loc> URLs it declares.
Child sitemaps of an index are listed, not followed.
"""
import logging
from dataclasses import dataclass, field

from lxml import etree

from sitecheck.services.fetcher import Fetcher, FetchError

logger = logging.getLogger(__name__)

LOC_PARENTS = ("url", "sitemap")


@dataclass
class SitemapParseResult:
    success: bool
    urls: list[str] = field(default_factory=list)
    error: str | None = None


def _local_name(element) -> str:
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def extract_locations(xml: str | bytes) -> list[str]:
    """
    Parse sitemap XML into an ordered, de-duplicated list of URLs.

    Raises:
        etree.XMLSyntaxError: if the document is not well-formed XML
    """
    if isinstance(xml, str):
        xml = xml.encode("utf-8")

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    root = etree.fromstring(xml, parser=parser)

    urls: list[str] = []
    seen: set[str] = set()
    for element in root.iter():
        if _local_name(element) not in LOC_PARENTS:
            continue
        for child in element:
            if _local_name(child) != "loc":
                continue
            value = (child.text or "").strip()
            if value.startswith("http") and value not in seen:
                seen.add(value)
                urls.append(value)
    return urls


class SitemapExtractor:
    """Fetch + parse a sitemap without ever raising to the caller."""

    def __init__(self, fetcher: Fetcher, timeout: float | None = None):
        self.fetcher = fetcher
        self.timeout = timeout

    async def parse(self, sitemap_url: str) -> SitemapParseResult:
        try:
            response = await self.fetcher.fetch(sitemap_url, "GET", timeout=self.timeout)
            if response.status >= 400:
                raise FetchError(f"HTTP {response.status}", status=response.status)
            urls = extract_locations(response.body)
        except (FetchError, etree.LxmlError, ValueError) as e:
            logger.warning(f"Could not parse sitemap {sitemap_url}: {e}")
            return SitemapParseResult(success=False, urls=[], error=str(e))

        logger.info(f"Sitemap {sitemap_url}: {len(urls)} URLs found")
        return SitemapParseResult(success=True, urls=urls)
