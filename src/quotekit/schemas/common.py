"""Common schemas used across the API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class APIInfo(BaseModel):
    """API information response."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    name: str = Field(..., description="API name")
    version: str = Field(..., description="API version")
    status: str = Field(..., description="API status")
    environment: str = Field(..., description="Environment name")


class ErrorResponse(BaseModel):
    """Error body for domain errors."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    error: str = Field(..., description="Machine readable error code")
    message: str = Field(..., description="Primary error message")
    details: list[str] | None = Field(None, description="Individual problems")
    vertical: str | None = Field(None, description="Catalog concerned, if any")


class HealthResponse(BaseModel):
    """Liveness and catalog status."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    status: str = Field(..., pattern=r"^(healthy|degraded)$")
    timestamp: datetime = Field(..., description="Server time")
    version: str = Field(..., description="Application version")
    catalogs_loaded: int = Field(..., ge=0, description="Verticals available")
    email_enabled: bool = Field(..., description="Whether SMTP delivery is on")
    extraction_enabled: bool = Field(
        ..., description="Whether natural-language pre-fill is configured"
    )
