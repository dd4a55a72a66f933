"""Pydantic request/response schemas for the PicStyle API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class StyleParametersModel(BaseModel):
    """Styling knobs attached to a template."""

    saturation_factor: float = Field(gt=0.0)
    quantization_step: int = Field(ge=1, le=255)
    edge_threshold: int = Field(ge=0)


class TemplateResponse(BaseModel):
    """A stored template."""

    id: str
    name: str
    image_count: int
    thumbnail_url: str
    model: str = Field(description="Opaque style model token")
    style_parameters: StyleParametersModel
    created_at: datetime


class DeleteResponse(BaseModel):
    success: bool = True


class ConvertResponse(BaseModel):
    """URLs of the artifacts produced by a conversion."""

    outline: str | None = None
    colored: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    templates: int
    concurrent_requests: int
    queue_depth: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
