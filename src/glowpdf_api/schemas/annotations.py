from __future__ import annotations

from pydantic import BaseModel, Field

from glowpdf_api.core.annotations.model import (
    DEFAULT_PEN_WIDTH,
    DEFAULT_TEXT_SIZE,
    AnnotationSession,
    PageAnnotationBucket,
)
from glowpdf_api.core.colors import DEFAULT_COLOR, HEX_COLOR_PATTERN
from glowpdf_api.core.geometry.mapping import Point


class PointModel(BaseModel):
    x: float
    y: float


class StrokeInput(BaseModel):
    points: list[PointModel]
    color: str = Field(default=DEFAULT_COLOR, pattern=HEX_COLOR_PATTERN)
    width: float = Field(default=DEFAULT_PEN_WIDTH, gt=0)
    opacity: float = Field(default=1.0, ge=0, le=1)


class TextInput(BaseModel):
    x: float
    y: float
    text: str = Field(..., min_length=1)
    size: float = Field(default=DEFAULT_TEXT_SIZE, gt=0)
    color: str = Field(default=DEFAULT_COLOR, pattern=HEX_COLOR_PATTERN)


class PageAnnotationsInput(BaseModel):
    strokes: list[StrokeInput] = Field(default_factory=list)
    texts: list[TextInput] = Field(default_factory=list)
    viewport_width: float = Field(default=0, ge=0)
    viewport_height: float = Field(default=0, ge=0)


class AnnotationsPayload(BaseModel):
    pages: dict[int, PageAnnotationsInput] = Field(default_factory=dict)

    def to_session(self) -> AnnotationSession:
        session = AnnotationSession()
        for page_index, page in self.pages.items():
            viewport = (page.viewport_width, page.viewport_height)
            session.set_viewport(page_index, *viewport)
            for stroke in page.strokes:
                add_stroke(session, page_index, stroke, viewport)
            for text in page.texts:
                session.place_text(page_index, text.x, text.y, text.text, text.size, text.color, viewport=viewport)
        return session


def add_stroke(
    session: AnnotationSession,
    page_index: int,
    stroke: StrokeInput,
    viewport: tuple[float, float] | None = None,
) -> None:
    handle = session.begin_stroke(page_index, stroke.color, stroke.width, stroke.opacity, viewport=viewport)
    for point in stroke.points:
        session.append_point(handle, Point(point.x, point.y))
    session.commit_stroke(handle, viewport=viewport)


class EditorStrokeRequest(StrokeInput):
    page_index: int = Field(..., ge=0)
    viewport_width: float = Field(default=0, ge=0)
    viewport_height: float = Field(default=0, ge=0)
    tool: str | None = Field(default=None, pattern="^(pen|highlighter)$")


class EditorTextRequest(TextInput):
    page_index: int = Field(..., ge=0)
    viewport_width: float = Field(default=0, ge=0)
    viewport_height: float = Field(default=0, ge=0)


class BucketResponse(BaseModel):
    page_index: int
    strokes: list[StrokeInput]
    texts: list[TextInput]
    viewport_width: float
    viewport_height: float

    @classmethod
    def from_bucket(cls, page_index: int, bucket: PageAnnotationBucket | None) -> "BucketResponse":
        bucket = bucket or PageAnnotationBucket()
        return cls(
            page_index=page_index,
            strokes=[
                StrokeInput(
                    points=[PointModel(x=point.x, y=point.y) for point in stroke.points],
                    color=stroke.color,
                    width=stroke.width,
                    opacity=stroke.opacity,
                )
                for stroke in bucket.strokes
            ],
            texts=[
                TextInput(x=text.x, y=text.y, text=text.text, size=text.size, color=text.color)
                for text in bucket.texts
            ],
            viewport_width=bucket.viewport_width,
            viewport_height=bucket.viewport_height,
        )
