"""
Unit tests for request/response schemas.
"""
import pytest
from pydantic import ValidationError

from sitecheck.schemas.audit import (
    AuditResult,
    CheckRequest,
    DownloadRequest,
    LinkCrawlResult,
    SitemapSummary,
    validate_absolute_url,
)
from sitecheck.services.sitemap import SitemapParseResult


class TestUrlValidation:
    """Test absolute URL validation."""

    @pytest.mark.parametrize("url", ["https://good.example", "http://good.example:8080/path?q=1", " https://good.example/ "])
    def test_valid(self, url):
        """Test absolute http(s) URLs are accepted and trimmed."""
        assert validate_absolute_url(url) == url.strip()

    @pytest.mark.parametrize(
        "url",
        ["", "   ", "good.example", "/relative", "mailto:a@good.example", "https://", "http://good .example", "http://good.example:99999", "https://good.example/\x01", "https://good.example/\x7f"],
    )
    def test_invalid(self, url):
        """Test everything else is rejected."""
        with pytest.raises(ValueError):
            validate_absolute_url(url)

    def test_check_request_alias(self):
        """Test sitemapUrl is read from the camelCase key."""
        request = CheckRequest.model_validate(
            {"url": "https://good.example", "sitemapUrl": "https://good.example/sitemap.xml"}
        )

        assert request.sitemap_url == "https://good.example/sitemap.xml"

    def test_check_request_rejects_bad_sitemap(self):
        """Test an invalid sitemapUrl fails validation."""
        with pytest.raises(ValidationError):
            CheckRequest.model_validate({"url": "https://good.example", "sitemapUrl": "nope"})


class TestAuditResult:
    """Test the composite result."""

    def test_response_keys(self):
        """Test aliased keys and omission of absent optional blocks."""
        result = AuditResult(
            functionality={"Forms present": False},
            security={"SSL enabled": True},
            seo={"Page title": True},
            ui_features={"Color contrast": True},
        )

        assert result.to_response() == {
            "Functionality": {"Forms present": False},
            "Security": {"SSL enabled": True},
            "SEO": {"Page title": True},
            "UIFeatures": {"Color contrast": True},
        }

    def test_sitemap_block(self):
        """Test the sitemap summary serializes with its display keys."""
        summary = SitemapSummary.from_parse_result(SitemapParseResult(success=False, error="HTTP 404"))
        result = AuditResult(sitemap=summary, link_crawl=LinkCrawlResult())

        body = result.to_response()

        assert body["Sitemap"] == {"Sitemap Status": "Invalid", "Total URLs Found": 0, "Parse Error": "HTTP 404"}
        assert body["LinkCrawl"] == {"totalLinks": 0, "testedLinks": 0, "perLink": []}

    def test_immutable(self):
        """Test a returned result cannot be reassigned."""
        result = AuditResult()

        with pytest.raises(ValidationError):
            result.error = "changed"

    def test_values_keep_their_type(self):
        """Test booleans are not coerced to numbers and vice versa."""
        result = AuditResult(functionality={"Links working": True, "Load time": 1200, "Grade": "A"})

        assert result.functionality["Links working"] is True
        assert result.functionality["Load time"] == 1200
        assert result.functionality["Grade"] == "A"


class TestDownloadRequest:
    """Test download request helpers."""

    def test_has_category(self):
        """Test at least one category must be an object."""
        assert DownloadRequest(results={"SEO": {}}, url="x").has_category() is True
        assert DownloadRequest(results={"SEO": "bad"}, url="x").has_category() is False
        assert DownloadRequest().has_category() is False
