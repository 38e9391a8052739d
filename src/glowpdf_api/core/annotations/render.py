from __future__ import annotations

from dataclasses import dataclass

from glowpdf_api.core.annotations.model import PageAnnotationBucket
from glowpdf_api.core.colors import hex_to_rgb
from glowpdf_api.core.geometry.mapping import PageMapping

RGB = tuple[float, float, float]


@dataclass(frozen=True)
class LineCommand:
    start: tuple[float, float]
    end: tuple[float, float]
    color: RGB
    width: float
    opacity: float
    round_cap: bool = True


@dataclass(frozen=True)
class TextCommand:
    origin: tuple[float, float]
    text: str
    size: float
    color: RGB


RenderCommand = LineCommand | TextCommand


def build_render_commands(
    bucket: PageAnnotationBucket,
    pdf_width: float,
    pdf_height: float,
) -> list[RenderCommand]:
    """Lay out one bucket in page space (points, y-up).

    Stroke segments come first in commit order, then texts in placement
    order. Strokes with fewer than two points draw nothing.
    """
    mapping = PageMapping.for_page(pdf_width, pdf_height, bucket.viewport_width, bucket.viewport_height)
    commands: list[RenderCommand] = []
    for stroke in bucket.strokes:
        if len(stroke.points) < 2:
            continue
        color = hex_to_rgb(stroke.color)
        width = mapping.scale_length(stroke.width)
        mapped = [mapping.to_page(point.x, point.y) for point in stroke.points]
        for start, end in zip(mapped, mapped[1:]):
            commands.append(
                LineCommand(start=start, end=end, color=color, width=width, opacity=stroke.opacity)
            )
    for text in bucket.texts:
        commands.append(
            TextCommand(
                origin=mapping.text_anchor_to_page(text.x, text.y, text.size),
                text=text.text,
                size=mapping.scale_length(text.size),
                color=hex_to_rgb(text.color),
            )
        )
    return commands
