"""Pydantic request/response schemas for the ShotThumb API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ThumbnailResponse(BaseModel):
    """Result of a data URL thumbnail request."""

    skipped: bool = Field(description="True when the image is small enough to be used as it is")
    data_url: str | None = Field(default=None, description="PNG thumbnail as a data URL")
    width: int | None = Field(default=None, description="Thumbnail width in pixels")
    height: int | None = Field(default=None, description="Thumbnail height in pixels")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    concurrent_requests: int
    queue_depth: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
