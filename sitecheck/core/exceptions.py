"""
Custom HTTP exceptions for sitecheck.

Every API error is rendered as {"error": ..., "details": ...}.
"""
from fastapi import HTTPException, status


class APIError(HTTPException):
    """Base API error carrying a short message and optional details."""

    def __init__(self, status_code: int, error: str, details: str | None = None):
        super().__init__(status_code=status_code, detail=error)
        self.error = error
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class BadRequestError(APIError):
    """Bad request exception."""

    def __init__(self, error: str, details: str | None = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, error, details)


class PageFetchError(APIError):
    """The audited page itself could not be fetched."""

    def __init__(self, details: str | None = None):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to check website", details)


class ReportGenerationError(APIError):
    """Report rendering failed."""

    def __init__(self, error: str, details: str | None = None):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, error, details)
