"""
Pydantic schemas for API request/response validation.
"""
from sitecheck.schemas.common import BaseSchema, ErrorResponse, HealthResponse
from sitecheck.schemas.audit import (
    CATEGORY_KEYS,
    AuditResult,
    CheckRequest,
    CheckValue,
    DownloadRequest,
    LinkCrawlResult,
    LinkOutcome,
    SitemapSummary,
    validate_absolute_url,
)

__all__ = [
    "BaseSchema",
    "ErrorResponse",
    "HealthResponse",
    "CATEGORY_KEYS",
    "AuditResult",
    "CheckRequest",
    "CheckValue",
    "DownloadRequest",
    "LinkCrawlResult",
    "LinkOutcome",
    "SitemapSummary",
    "validate_absolute_url",
]
