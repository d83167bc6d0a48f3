"""Pydantic response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field


class FieldWarningResponse(BaseModel):
    """A field that was left out of the result."""

    field_name: str
    reason: str
    message: str


class AnalysisResponse(BaseModel):
    """Response schema for a license analysis request."""

    analysis: str
    state: str
    fields: dict[str, str] = Field(default_factory=dict)
    warnings: list[FieldWarningResponse] = Field(default_factory=list)
    processed_image: str | None = None
    processing_time_ms: float = 0.0


class TemplatesResponse(BaseModel):
    """Response schema listing available layout templates."""

    templates: list[str]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
