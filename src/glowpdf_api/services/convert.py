from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from io import BytesIO

import fitz
from docx import Document
from docx.shared import Pt

from glowpdf_api.core.errors import PDFError, UserConstraintError
from glowpdf_api.services.archive import NamedFile, file_stem
from glowpdf_api.services.organize import save_pdf
from glowpdf_api.services.renderer import encode_jpeg, get_renderer, open_pdf, pdf_operation, render_page

logger = logging.getLogger("glowpdf_api")

PREVIEW_SCALE = 0.5
PREVIEW_QUALITY = 0.8
THUMBNAIL_SCALE = 0.3
THUMBNAIL_QUALITY = 0.7
SAME_ROW_TOLERANCE_PT = 5
NEW_LINE_THRESHOLD_PT = 10

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"


@dataclass(frozen=True)
class TextItem:
    text: str
    x: float
    y: float


@dataclass(frozen=True)
class RenderedPage:
    data: bytes
    width: int
    height: int


@pdf_operation("Failed to convert PDF to images.")
def pdf_to_images(data: bytes, filename: str | None = None, scale: float = 2.0, quality: float = 0.9) -> list[NamedFile]:
    stem = file_stem(filename)
    images: list[NamedFile] = []
    with open_pdf(data) as doc:
        for page in doc:
            pix = render_page(page, scale)
            images.append(NamedFile(filename=f"{stem}_page_{page.number + 1}.jpg", data=encode_jpeg(pix, quality)))
    return images


def _image_kind(data: bytes) -> str | None:
    if data.startswith(PNG_MAGIC):
        return "png"
    if data.startswith(JPEG_MAGIC):
        return "jpeg"
    return None


@pdf_operation("Failed to convert images.")
def images_to_pdf(files: list[NamedFile]) -> bytes:
    """One page per image, sized to the image's pixel dimensions."""
    doc = fitz.open()
    try:
        for item in files:
            kind = _image_kind(item.data)
            if kind is None:
                logger.warning("Skipping unsupported image filename=%s", item.filename)
                continue
            try:
                pix = fitz.Pixmap(item.data)
            except RuntimeError as exc:
                logger.warning("Failed to embed image filename=%s error=%s", item.filename, exc)
                continue
            page = doc.new_page(width=pix.width, height=pix.height)
            page.insert_image(page.rect, stream=item.data)
        if doc.page_count == 0:
            raise UserConstraintError(
                "None of the selected files could be read as a JPG or PNG image.",
                details={"file_count": len(files)},
            )
        logger.info("Converted images=%s pages=%s", len(files), doc.page_count)
        return save_pdf(doc)
    finally:
        doc.close()


def _compare_items(a: TextItem, b: TextItem) -> int:
    y_diff = b.y - a.y
    if abs(y_diff) > SAME_ROW_TOLERANCE_PT:
        return 1 if y_diff > 0 else -1
    return (a.x > b.x) - (a.x < b.x)


def _page_text_items(page: fitz.Page) -> list[TextItem]:
    height = page.rect.height
    items: list[TextItem] = []
    for block in page.get_text("dict").get("blocks", []):
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                x, y = span.get("origin", (0.0, 0.0))
                # Baselines flipped to y-up so rows read top to bottom when sorted descending.
                items.append(TextItem(text=span.get("text", ""), x=x, y=height - y))
    return items


def page_lines(page: fitz.Page) -> list[str]:
    items = sorted(_page_text_items(page), key=functools.cmp_to_key(_compare_items))
    lines: list[str] = []
    current_y: float | None = None
    current = ""
    for item in items:
        if current_y is not None and abs(item.y - current_y) > NEW_LINE_THRESHOLD_PT:
            if current.strip():
                lines.append(current)
            current = ""
        current_y = item.y
        current += item.text + " "
    if current.strip():
        lines.append(current)
    return lines


@pdf_operation("Failed to convert PDF to Word.")
def pdf_to_word(data: bytes) -> bytes:
    """Text-only conversion: layout, images and fonts are not carried over."""
    out = Document()
    style = out.styles["Normal"]
    style.font.size = Pt(11)
    with open_pdf(data) as doc:
        for page in doc:
            for line in page_lines(page):
                out.add_paragraph(line.rstrip())
            if page.number < doc.page_count - 1:
                out.add_page_break()
    buffer = BytesIO()
    out.save(buffer)
    return buffer.getvalue()


@pdf_operation("Failed to render page.")
def render_page_image(data: bytes, page_index: int, scale: float, kind: str = "png") -> RenderedPage:
    with open_pdf(data) as doc:
        if page_index < 0 or page_index >= doc.page_count:
            raise UserConstraintError(
                "Page does not exist.", details={"page_index": page_index, "page_count": doc.page_count}
            )
        pix = render_page(doc[page_index], scale)
        payload = pix.tobytes("png") if kind == "png" else encode_jpeg(pix, PREVIEW_QUALITY)
        return RenderedPage(data=payload, width=pix.width, height=pix.height)


@pdf_operation("Preview generation failed.")
def first_page_preview(data: bytes) -> RenderedPage:
    return render_page_image(data, 0, PREVIEW_SCALE, kind="jpeg")


@pdf_operation("Failed to generate page previews.")
def page_thumbnails(data: bytes, max_pages: int = 50) -> list[bytes | None]:
    """JPEG thumbnails for the first ``max_pages`` pages; failed pages give ``None``."""
    get_renderer()
    thumbnails: list[bytes | None] = []
    with open_pdf(data) as doc:
        for index in range(min(doc.page_count, max_pages)):
            try:
                pix = render_page(doc[index], THUMBNAIL_SCALE)
                thumbnails.append(encode_jpeg(pix, THUMBNAIL_QUALITY))
            except (PDFError, RuntimeError) as exc:
                logger.warning("Failed to render thumbnail page=%s error=%s", index + 1, exc)
                thumbnails.append(None)
    return thumbnails
