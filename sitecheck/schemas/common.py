"""
Common Pydantic schemas used across the API.
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class ErrorResponse(BaseSchema):
    """Error response."""

    error: str
    details: str | None = None


class HealthResponse(BaseSchema):
    status: str
    version: str
