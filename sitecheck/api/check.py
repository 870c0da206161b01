"""
Audit endpoint.

POST /check runs every check against one page, plus an optional sitemap crawl.
"""
from fastapi import APIRouter, Depends

from sitecheck.api.deps import get_audit_service
from sitecheck.schemas.audit import CheckRequest
from sitecheck.schemas.common import ErrorResponse
from sitecheck.services.audit_service import AuditService

router = APIRouter(tags=["Check"])


@router.post(
    "/check",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def check_website(
    payload: CheckRequest,
    service: AuditService = Depends(get_audit_service),
) -> dict:
    """
    Audit a website.

    Returns the check results grouped by category. When `sitemapUrl` is
    given, the result also carries `Sitemap` and `LinkCrawl` blocks.
    """
    result = await service.run(payload.url, sitemap_url=payload.sitemap_url)
    return result.to_response()
