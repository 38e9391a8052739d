from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Iterator

from glowpdf_api.core.colors import DEFAULT_COLOR, HIGHLIGHTER_COLOR, normalize_hex_color
from glowpdf_api.core.geometry.mapping import Point

DEFAULT_TEXT_SIZE = 16.0
DEFAULT_PEN_WIDTH = 3.0


@dataclass(frozen=True)
class StrokeStyle:
    color: str
    width: float
    opacity: float


HIGHLIGHTER = StrokeStyle(color=HIGHLIGHTER_COLOR, width=20.0, opacity=0.4)


@dataclass
class Stroke:
    points: list[Point]
    color: str
    width: float
    opacity: float


@dataclass(frozen=True)
class TextAnnotation:
    x: float
    y: float
    text: str
    size: float = DEFAULT_TEXT_SIZE
    color: str = DEFAULT_COLOR


@dataclass
class PageAnnotationBucket:
    strokes: list[Stroke] = field(default_factory=list)
    texts: list[TextAnnotation] = field(default_factory=list)
    viewport_width: float = 0.0
    viewport_height: float = 0.0

    def is_empty(self) -> bool:
        return not self.strokes and not self.texts


@dataclass(frozen=True)
class StrokeHandle:
    handle_id: int
    page_index: int


Viewport = tuple[float, float]


def _validate_style(color: str, width: float, opacity: float) -> str:
    if width <= 0:
        raise ValueError("Stroke width must be positive")
    if not 0 <= opacity <= 1:
        raise ValueError("Stroke opacity must be between 0 and 1")
    return normalize_hex_color(color)


class AnnotationSession:
    """Per-page annotations accumulated during one editing session.

    Points and text anchors stay in viewport space until the session is
    flattened. Each bucket remembers the viewport it was captured at; passing
    a viewport when committing a stroke or placing a text refreshes it.
    """

    def __init__(self) -> None:
        self._buckets: dict[int, PageAnnotationBucket] = {}
        self._open: dict[int, Stroke] = {}
        self._handle_ids = itertools.count(1)

    def _bucket(self, page_index: int, viewport: Viewport | None) -> PageAnnotationBucket:
        bucket = self._buckets.get(page_index)
        if bucket is None:
            bucket = PageAnnotationBucket()
            self._buckets[page_index] = bucket
        if viewport is not None:
            self.set_viewport(page_index, *viewport)
        return bucket

    def set_viewport(self, page_index: int, width: float, height: float) -> None:
        bucket = self._buckets.setdefault(page_index, PageAnnotationBucket())
        # Zero keeps whatever was captured before.
        bucket.viewport_width = width or bucket.viewport_width
        bucket.viewport_height = height or bucket.viewport_height

    def begin_stroke(
        self,
        page_index: int,
        color: str,
        width: float,
        opacity: float,
        viewport: Viewport | None = None,
    ) -> StrokeHandle:
        color = _validate_style(color, width, opacity)
        self._bucket(page_index, viewport)
        handle = StrokeHandle(handle_id=next(self._handle_ids), page_index=page_index)
        self._open[handle.handle_id] = Stroke(points=[], color=color, width=width, opacity=opacity)
        return handle

    def append_point(self, handle: StrokeHandle, point: Point) -> None:
        self._open_stroke(handle).points.append(point)

    def commit_stroke(self, handle: StrokeHandle, viewport: Viewport | None = None) -> Stroke:
        stroke = self._open_stroke(handle)
        del self._open[handle.handle_id]
        bucket = self._bucket(handle.page_index, viewport)
        bucket.strokes.append(stroke)
        return stroke

    def _open_stroke(self, handle: StrokeHandle) -> Stroke:
        try:
            return self._open[handle.handle_id]
        except KeyError:
            raise ValueError(f"Stroke {handle.handle_id} is not open") from None

    def place_text(
        self,
        page_index: int,
        x: float,
        y: float,
        text: str,
        size: float = DEFAULT_TEXT_SIZE,
        color: str = DEFAULT_COLOR,
        viewport: Viewport | None = None,
    ) -> TextAnnotation:
        if not text or not text.strip():
            raise ValueError("Text annotation is empty")
        if size <= 0:
            raise ValueError("Text size must be positive")
        annotation = TextAnnotation(x=x, y=y, text=text, size=size, color=normalize_hex_color(color))
        self._bucket(page_index, viewport).texts.append(annotation)
        return annotation

    def undo_last(self, page_index: int) -> Stroke | TextAnnotation | None:
        """Remove the newest stroke, or the newest text once no strokes remain."""
        bucket = self._buckets.get(page_index)
        if bucket is None:
            return None
        if bucket.strokes:
            return bucket.strokes.pop()
        if bucket.texts:
            return bucket.texts.pop()
        return None

    def clear_page(self, page_index: int) -> None:
        bucket = self._buckets.get(page_index)
        if bucket is not None:
            bucket.strokes.clear()
            bucket.texts.clear()

    def get_bucket(self, page_index: int) -> PageAnnotationBucket | None:
        return self._buckets.get(page_index)

    def items(self) -> Iterator[tuple[int, PageAnnotationBucket]]:
        return iter(sorted(self._buckets.items()))

    def is_empty(self) -> bool:
        return all(bucket.is_empty() for bucket in self._buckets.values())

    def discard(self) -> None:
        self._buckets.clear()
        self._open.clear()
