"""
Audit schemas.
"""
from typing import Any, Literal, Union
from urllib.parse import urlparse

from pydantic import ConfigDict, Field, field_validator

from sitecheck.schemas.common import BaseSchema

CheckValue = Union[bool, str, int, float]

CATEGORY_KEYS = ("Functionality", "Security", "SEO", "UIFeatures")


def validate_absolute_url(value: str) -> str:
    """Return the trimmed URL, or raise ValueError if it is not an absolute http(s) URL."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("URL cannot be empty")

    value = value.strip()
    try:
        parsed = urlparse(value)
        # Accessing .port validates the port component
        parsed.port
    except ValueError as e:
        raise ValueError(f"Invalid URL: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Invalid URL scheme: {parsed.scheme or 'none'} (must be http or https)")
    if not parsed.hostname:
        raise ValueError("Invalid URL format: missing domain")
    if any(ch.isspace() for ch in value):
        raise ValueError("Invalid URL format: contains whitespace")
    if not value.isprintable():
        raise ValueError("Invalid URL format: contains non-printable characters")
    return value


class CheckRequest(BaseSchema):
    """Audit request."""

    url: str = Field(..., description="Page to audit", examples=["https://example.com"])
    sitemap_url: str | None = Field(
        default=None,
        alias="sitemapUrl",
        description="Optional sitemap whose URLs are crawled for reachability",
    )

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return validate_absolute_url(value)

    @field_validator("sitemap_url")
    @classmethod
    def check_sitemap_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_absolute_url(value)


class LinkOutcome(BaseSchema):
    """Reachability of one crawled URL."""

    url: str
    http_status: int | None = Field(default=None, alias="httpStatus")
    reachable: bool
    https_valid: bool = Field(alias="httpsValid")
    error_message: str | None = Field(default=None, alias="errorMessage")


class LinkCrawlResult(BaseSchema):
    """Outcome of crawling every URL listed in a sitemap."""

    total_links: int = Field(default=0, alias="totalLinks")
    tested_links: int = Field(default=0, alias="testedLinks")
    per_link: list[LinkOutcome] = Field(default_factory=list, alias="perLink")


class SitemapSummary(BaseSchema):
    """Sitemap block of the audit result."""

    status: Literal["Valid", "Invalid"] = Field(alias="Sitemap Status")
    url_count: int = Field(default=0, alias="Total URLs Found")
    parse_error: str | None = Field(default=None, alias="Parse Error")

    @classmethod
    def from_parse_result(cls, result) -> "SitemapSummary":
        return cls(
            status="Valid" if result.success else "Invalid",
            url_count=len(result.urls),
            parse_error=result.error,
        )


class AuditResult(BaseSchema):
    """Composite result of one audit. Immutable once built."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)

    functionality: dict[str, CheckValue] = Field(default_factory=dict, alias="Functionality")
    security: dict[str, CheckValue] = Field(default_factory=dict, alias="Security")
    seo: dict[str, CheckValue] = Field(default_factory=dict, alias="SEO")
    ui_features: dict[str, CheckValue] = Field(default_factory=dict, alias="UIFeatures")
    sitemap: SitemapSummary | None = Field(default=None, alias="Sitemap")
    link_crawl: LinkCrawlResult | None = Field(default=None, alias="LinkCrawl")
    error: str | None = None

    def to_response(self) -> dict[str, Any]:
        """JSON body for the API: aliased keys, absent optional blocks omitted."""
        data = self.model_dump(by_alias=True)
        return {key: value for key, value in data.items() if value is not None}


class DownloadRequest(BaseSchema):
    """Report download request. Fields are checked by the endpoint, not here."""

    results: dict[str, Any] | None = None
    url: str | None = None

    def has_category(self) -> bool:
        return any(isinstance((self.results or {}).get(key), dict) for key in CATEGORY_KEYS)
