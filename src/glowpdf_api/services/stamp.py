from __future__ import annotations

import logging
from typing import Literal

import fitz

from glowpdf_api.core.errors import UserConstraintError
from glowpdf_api.services.annotate import to_mupdf_point
from glowpdf_api.services.organize import save_pdf
from glowpdf_api.services.renderer import open_pdf, pdf_operation

logger = logging.getLogger("glowpdf_api")

WATERMARK_FONT = "hebo"
WATERMARK_COLOR = (0.7, 0.7, 0.7)
WATERMARK_ANGLE = 45
PAGE_NUMBER_FONT = "helv"
PAGE_NUMBER_SIZE = 12
PAGE_NUMBER_MARGIN = 20

PageNumberPosition = Literal["bottom-center", "bottom-right", "top-center", "top-right"]
PAGE_NUMBER_POSITIONS = ("bottom-center", "bottom-right", "top-center", "top-right")


@pdf_operation("Failed to add watermark.")
def add_watermark(data: bytes, text: str, opacity: float = 0.5, size: float = 50) -> bytes:
    """Stamp ``text`` diagonally across the middle of every page."""
    if not text or not text.strip():
        raise UserConstraintError("Watermark text is empty.")
    if not 0 <= opacity <= 1:
        raise UserConstraintError("Watermark opacity must be between 0 and 1.", details={"opacity": opacity})
    if size <= 0:
        raise UserConstraintError("Watermark size must be positive.", details={"size": size})
    with open_pdf(data) as doc:
        for page in doc:
            width, height = page.rect.width, page.rect.height
            origin = to_mupdf_point(page, width / 2 - (len(text) * size * 0.3), height / 2)
            # Positive angle: the stamp climbs to the right on the visible page.
            page.insert_text(
                origin,
                text,
                fontname=WATERMARK_FONT,
                fontsize=size,
                color=WATERMARK_COLOR,
                fill_opacity=opacity,
                morph=(origin, fitz.Matrix(WATERMARK_ANGLE)),
                rotate=page.rotation,
            )
        logger.info("Watermarked pages=%s", doc.page_count)
        return save_pdf(doc)


def _page_number_origin(
    position: str,
    width: float,
    height: float,
    text_width: float,
    text_height: float,
) -> tuple[float, float]:
    margin = PAGE_NUMBER_MARGIN
    if position == "bottom-center":
        return width / 2 - text_width / 2, margin
    if position == "bottom-right":
        return width - text_width - margin, margin
    if position == "top-center":
        return width / 2 - text_width / 2, height - margin - text_height
    if position == "top-right":
        return width - text_width - margin, height - margin - text_height
    raise UserConstraintError(
        f"Unknown page number position {position!r}.", details={"positions": list(PAGE_NUMBER_POSITIONS)}
    )


@pdf_operation("Failed to add page numbers.")
def add_page_numbers(data: bytes, position: PageNumberPosition = "bottom-center", start_from: int = 1) -> bytes:
    font = fitz.Font(PAGE_NUMBER_FONT)
    text_height = (font.ascender - font.descender) * PAGE_NUMBER_SIZE
    with open_pdf(data) as doc:
        for index, page in enumerate(doc):
            label = str(index + start_from)
            text_width = font.text_length(label, fontsize=PAGE_NUMBER_SIZE)
            x, y = _page_number_origin(position, page.rect.width, page.rect.height, text_width, text_height)
            page.insert_text(
                to_mupdf_point(page, x, y),
                label,
                fontname=PAGE_NUMBER_FONT,
                fontsize=PAGE_NUMBER_SIZE,
                color=(0, 0, 0),
                rotate=page.rotation,
            )
        return save_pdf(doc)
