from __future__ import annotations

from io import BytesIO

import fitz
import pytest
from docx import Document

from glowpdf_api.core.errors import UserConstraintError
from glowpdf_api.services.archive import NamedFile
from glowpdf_api.services.convert import (
    first_page_preview,
    images_to_pdf,
    page_lines,
    page_thumbnails,
    pdf_to_images,
    pdf_to_word,
    render_page_image,
)
from tests.pdf_factory import make_contract_pdf_bytes, make_jpeg_bytes, make_png_bytes, make_text_pdf_bytes, page_sizes


def test_pdf_to_images_one_jpeg_per_page() -> None:
    images = pdf_to_images(make_text_pdf_bytes(["P1", "P2"]), "report.pdf", scale=1.0, quality=0.8)

    assert [image.filename for image in images] == ["report_page_1.jpg", "report_page_2.jpg"]
    for image in images:
        assert image.data.startswith(b"\xff\xd8\xff")
        pix = fitz.Pixmap(image.data)
        assert (pix.width, pix.height) == (612, 792)


def test_images_to_pdf_sizes_pages_to_images() -> None:
    files = [
        NamedFile("a.png", make_png_bytes(40, 30)),
        NamedFile("notes.txt", b"plain text"),
        NamedFile("b.jpg", make_jpeg_bytes(64, 48)),
    ]

    output = images_to_pdf(files)

    assert page_sizes(output) == [(40, 30), (64, 48)]


def test_images_to_pdf_without_usable_images_fails() -> None:
    with pytest.raises(UserConstraintError):
        images_to_pdf([NamedFile("notes.txt", b"plain text")])


def test_page_lines_read_top_to_bottom() -> None:
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((300, 200), "right", fontsize=12)
    page.insert_text((72, 200), "left", fontsize=12)
    page.insert_text((72, 100), "title", fontsize=12)

    lines = [line.strip() for line in page_lines(page)]
    doc.close()

    assert lines[0] == "title"
    assert lines[1].split() == ["left", "right"]


def test_pdf_to_word_keeps_text_and_page_breaks() -> None:
    output = pdf_to_word(make_contract_pdf_bytes())

    document = Document(BytesIO(output))
    texts = [paragraph.text for paragraph in document.paragraphs if paragraph.text]
    assert texts[0].startswith("This Agreement is entered into")
    assert "Payment is due within thirty (30) days of invoice receipt." in texts
    assert texts[-1] == "Signature page"
    # The page break sits in a paragraph of its own.
    assert len(document.paragraphs) > len(texts)


def test_render_page_image_reports_pixel_size() -> None:
    rendered = render_page_image(make_text_pdf_bytes(), 0, 0.5)
    assert rendered.data.startswith(b"\x89PNG")
    assert (rendered.width, rendered.height) == (306, 396)
    with pytest.raises(UserConstraintError):
        render_page_image(make_text_pdf_bytes(), 3, 1.0)


def test_first_page_preview_is_jpeg() -> None:
    preview = first_page_preview(make_text_pdf_bytes(["P1", "P2"]))
    assert preview.data.startswith(b"\xff\xd8\xff")
    assert preview.width == 306


def test_thumbnails_respect_page_limit() -> None:
    thumbnails = page_thumbnails(make_text_pdf_bytes(["P1", "P2", "P3"]), max_pages=2)
    assert len(thumbnails) == 2
    assert all(thumbnail and thumbnail.startswith(b"\xff\xd8\xff") for thumbnail in thumbnails)
