from __future__ import annotations

from dataclasses import dataclass

TEXT_BASELINE_FACTOR = 0.8


@dataclass(frozen=True)
class Point:
    """Viewport pixel position, origin top-left, y increasing downward."""

    x: float
    y: float


@dataclass(frozen=True)
class PageMapping:
    """Maps one captured viewport onto one page.

    Page space is PDF user space: points, origin bottom-left, y increasing
    upward. A zero or missing viewport dimension falls back to the page's own
    dimension, which gives a scale of 1 on that axis.
    """

    pdf_width: float
    pdf_height: float
    viewport_width: float
    viewport_height: float

    @classmethod
    def for_page(
        cls,
        pdf_width: float,
        pdf_height: float,
        viewport_width: float | None,
        viewport_height: float | None,
    ) -> "PageMapping":
        return cls(
            pdf_width=pdf_width,
            pdf_height=pdf_height,
            viewport_width=viewport_width or pdf_width or 1.0,
            viewport_height=viewport_height or pdf_height or 1.0,
        )

    @property
    def scale_x(self) -> float:
        return self.pdf_width / self.viewport_width

    @property
    def scale_y(self) -> float:
        return self.pdf_height / self.viewport_height

    def to_page(self, x: float, y: float) -> tuple[float, float]:
        return x * self.scale_x, self.pdf_height - (y * self.scale_y)

    def text_anchor_to_page(self, x: float, y: float, size: float) -> tuple[float, float]:
        # Viewport anchors are the top-left of the text box, not the baseline.
        page_x, page_y = self.to_page(x, y)
        return page_x, page_y - (size * self.scale_y * TEXT_BASELINE_FACTOR)

    def to_viewport(self, x: float, y: float) -> tuple[float, float]:
        return x / self.scale_x, (self.pdf_height - y) / self.scale_y

    def scale_length(self, value: float) -> float:
        """Stroke widths and font sizes follow the horizontal scale."""
        return value * self.scale_x


def viewport_to_page(
    point: Point,
    pdf_width: float,
    pdf_height: float,
    viewport_width: float | None,
    viewport_height: float | None,
) -> tuple[float, float]:
    mapping = PageMapping.for_page(pdf_width, pdf_height, viewport_width, viewport_height)
    return mapping.to_page(point.x, point.y)
