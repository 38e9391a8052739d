from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PageSize(BaseModel):
    width_pt: float
    height_pt: float


class EditSessionResponse(BaseModel):
    session_id: str
    filename: str
    page_count: int = Field(..., ge=0)
    pages: list[PageSize]
    created_at: datetime


class ThumbnailsResponse(BaseModel):
    page_count: int
    # Base64 JPEG per page, empty string where a page failed to render.
    thumbnails: list[str]
