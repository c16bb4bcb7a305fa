"""
LibraryHub Backend — Shared Schema Pieces
===========================================

What:  The camelCase base model used by every response body, plus the error
       and health payloads.

Wire naming:
    Python attributes are snake_case; the frontend contract is camelCase
    (bookId, stockState, porcentLoan ...). The alias generator produces the
    camelCase names and FastAPI serialises response models by alias.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    Error body returned by every global exception handler.

    Example:
        {
            "error": "validation_error",
            "message": "query was empty",
            "details": {"field": "query"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
