"""
Unit tests for sampled link and image validation.
"""
import pytest
from bs4 import BeautifulSoup

from fixtures.sample_pages import NO_LINKS_HTML
from sitecheck.services.link_validator import (
    has_working_images,
    has_working_links,
    sample_targets,
)


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class TestSampleTargets:
    """Test candidate selection."""

    def test_first_n_in_document_order(self):
        """Test only the first N anchors are sampled, resolved against the base URL."""
        html = "".join(f'<a href="/p{i}">{i}</a>' for i in range(10))

        targets = sample_targets(soup_of(html), "https://good.example/", "a[href]", "href", limit=5)

        assert targets == [f"https://good.example/p{i}" for i in range(5)]

    def test_skips_fragments_and_javascript(self):
        """Test fragment and javascript: links are skipped but still use a sample slot."""
        html = (
            '<a href="#top">top</a>'
            '<a href="javascript:void(0)">js</a>'
            '<a href="https://other.example/x">x</a>'
        )

        targets = sample_targets(soup_of(html), "https://good.example/", "a[href]", "href", limit=2)

        assert targets == []


class TestHasWorkingLinks:
    """Test link validation."""

    @pytest.mark.asyncio
    async def test_no_links_is_false(self, site, fetcher):
        """Test a page with zero anchors is reported as not working."""
        assert await has_working_links(soup_of(NO_LINKS_HTML), "https://good.example/", fetcher) is False
        assert site.requests == []

    @pytest.mark.asyncio
    async def test_any_working_link_passes(self, site, fetcher):
        """Test one reachable link out of several is enough."""
        site.add("https://good.example/ok")
        html = '<a href="/broken">b</a><a href="/ok">ok</a>'

        assert await has_working_links(soup_of(html), "https://good.example/", fetcher) is True
        assert set(site.requested("HEAD")) == {"https://good.example/broken", "https://good.example/ok"}

    @pytest.mark.asyncio
    async def test_unparseable_href_is_skipped(self, site, fetcher):
        """Test a malformed href is skipped and the remaining links are still checked."""
        site.add("https://good.example/ok")
        html = '<a href="http://[bad/x">b</a><a href="/ok">ok</a>'

        assert await has_working_links(soup_of(html), "https://good.example/", fetcher) is True
        assert site.requested("HEAD") == ["https://good.example/ok"]

    @pytest.mark.asyncio
    async def test_head_error_counts_as_not_working(self, site, fetcher, monkeypatch):
        """Test an unexpected HEAD error fails that link only."""
        site.add("https://good.example/ok")
        original = fetcher.head_status

        async def flaky(url, timeout=None):
            if url.endswith("/boom"):
                raise RuntimeError("boom")
            return await original(url, timeout=timeout)

        monkeypatch.setattr(fetcher, "head_status", flaky)
        html = '<a href="/boom">b</a><a href="/ok">ok</a>'

        assert await has_working_links(soup_of(html), "https://good.example/", fetcher) is True

    @pytest.mark.asyncio
    async def test_redirect_status_counts_as_working(self, site, fetcher):
        """Test a 2xx/3xx final status counts as working."""
        site.add("https://good.example/created", status=201)

        assert await has_working_links(soup_of('<a href="/created">c</a>'), "https://good.example/", fetcher) is True

    @pytest.mark.asyncio
    async def test_all_broken_fails(self, site, fetcher):
        """Test every sampled link failing gives False."""
        site.add("https://good.example/down", status=500)
        html = '<a href="/missing">m</a><a href="/down">d</a>'

        assert await has_working_links(soup_of(html), "https://good.example/", fetcher) is False

    @pytest.mark.asyncio
    async def test_links_beyond_sample_not_probed(self, site, fetcher):
        """Test a working link past the first N is never seen."""
        site.add("https://good.example/p5")
        html = "".join(f'<a href="/p{i}">{i}</a>' for i in range(6))

        assert await has_working_links(soup_of(html), "https://good.example/", fetcher, limit=5) is False
        assert "https://good.example/p5" not in site.requested()


class TestHasWorkingImages:
    """Test image validation."""

    @pytest.mark.asyncio
    async def test_working_image(self, site, fetcher):
        """Test a reachable image source passes."""
        site.add("https://cdn.example/a.png")

        html = '<img src="https://cdn.example/a.png"><img src="/missing.png">'

        assert await has_working_images(soup_of(html), "https://good.example/", fetcher) is True

    @pytest.mark.asyncio
    async def test_no_images_is_false(self, fetcher):
        """Test a page without images is reported as not working."""
        assert await has_working_images(soup_of(NO_LINKS_HTML), "https://good.example/", fetcher) is False
