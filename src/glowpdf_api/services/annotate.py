from __future__ import annotations

import logging

import fitz

from glowpdf_api.core.annotations.model import AnnotationSession
from glowpdf_api.core.annotations.render import LineCommand, RenderCommand, TextCommand, build_render_commands
from glowpdf_api.services.organize import save_pdf
from glowpdf_api.services.renderer import open_pdf, pdf_operation

logger = logging.getLogger("glowpdf_api")

ANNOTATION_FONT = "helv"
ROUND_CAP = 1


def to_mupdf_point(page: fitz.Page, x: float, y: float) -> fitz.Point:
    # Render commands are y-up in the visible frame; MuPDF draws y-down in the
    # unrotated frame.
    return fitz.Point(x, page.rect.height - y) * page.derotation_matrix


def draw_commands(page: fitz.Page, commands: list[RenderCommand]) -> None:
    lines = [command for command in commands if isinstance(command, LineCommand)]
    texts = [command for command in commands if isinstance(command, TextCommand)]
    if lines:
        shape = page.new_shape()
        for line in lines:
            shape.draw_line(to_mupdf_point(page, *line.start), to_mupdf_point(page, *line.end))
            shape.finish(
                color=line.color,
                width=line.width,
                lineCap=ROUND_CAP if line.round_cap else 0,
                stroke_opacity=line.opacity,
                closePath=False,
            )
        shape.commit()
    for text in texts:
        page.insert_text(
            to_mupdf_point(page, *text.origin),
            text.text,
            fontname=ANNOTATION_FONT,
            fontsize=text.size,
            color=text.color,
            rotate=page.rotation,
        )


@pdf_operation("Failed to save edited PDF.")
def flatten_annotations(data: bytes, session: AnnotationSession) -> bytes:
    """Burn every bucket of ``session`` into a copy of ``data``.

    Pages without annotations are left untouched and buckets for pages the
    document does not have are skipped.
    """
    with open_pdf(data) as doc:
        drawn = 0
        for page_index, bucket in session.items():
            if page_index < 0 or page_index >= doc.page_count:
                logger.info("Skipping annotations for missing page_index=%s", page_index)
                continue
            if bucket.is_empty():
                continue
            page = doc[page_index]
            commands = build_render_commands(bucket, page.rect.width, page.rect.height)
            draw_commands(page, commands)
            drawn += 1
        logger.info("Flattened annotations pages=%s", drawn)
        return save_pdf(doc)
