"""
Shared API dependencies.
"""
from fastapi import Request

from sitecheck.services.audit_service import AuditService


def get_audit_service(request: Request) -> AuditService:
    """The AuditService built at startup."""
    return request.app.state.audit_service
