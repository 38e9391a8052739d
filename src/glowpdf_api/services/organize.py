from __future__ import annotations

import logging

import fitz

from glowpdf_api.core.errors import UserConstraintError
from glowpdf_api.services.archive import NamedFile, file_stem
from glowpdf_api.services.renderer import open_pdf, pdf_operation

logger = logging.getLogger("glowpdf_api")


def save_pdf(doc: fitz.Document) -> bytes:
    return doc.tobytes(garbage=3, deflate=True)


def _copy_pages(src: fitz.Document, indices: list[int]) -> bytes:
    out = fitz.open()
    try:
        for index in indices:
            out.insert_pdf(src, from_page=index, to_page=index)
        return save_pdf(out)
    finally:
        out.close()


def _check_indices(indices: list[int], page_count: int) -> None:
    out_of_range = sorted({index for index in indices if index < 0 or index >= page_count})
    if out_of_range:
        raise UserConstraintError(
            "Page selection refers to pages that do not exist.",
            details={"invalid_indices": out_of_range, "page_count": page_count},
        )


@pdf_operation("Failed to merge PDF files.")
def merge_pdfs(files: list[NamedFile]) -> bytes:
    """Concatenate every page of every input, in input order."""
    if len(files) < 2:
        raise UserConstraintError("Select at least two PDF files to merge.", details={"file_count": len(files)})
    merged = fitz.open()
    try:
        for item in files:
            with open_pdf(item.data, filename=item.filename) as src:
                merged.insert_pdf(src)
        logger.info("Merged files=%s pages=%s", len(files), merged.page_count)
        return save_pdf(merged)
    finally:
        merged.close()


@pdf_operation("Failed to split PDF.")
def split_pdf(data: bytes, filename: str | None = None) -> list[NamedFile]:
    stem = file_stem(filename)
    with open_pdf(data) as src:
        return [
            NamedFile(filename=f"{stem}_page_{index + 1}.pdf", data=_copy_pages(src, [index]))
            for index in range(src.page_count)
        ]


@pdf_operation("Failed to rotate PDF.")
def rotate_pdf(data: bytes, degrees: int) -> bytes:
    """Add ``degrees`` to every page's current rotation."""
    if degrees % 90 != 0:
        raise UserConstraintError("Rotation must be a multiple of 90 degrees.", details={"degrees": degrees})
    with open_pdf(data) as doc:
        for page in doc:
            page.set_rotation((page.rotation + degrees) % 360)
        return save_pdf(doc)


@pdf_operation("Failed to delete pages.")
def delete_pages(data: bytes, indices_to_delete: list[int]) -> bytes:
    with open_pdf(data) as src:
        doomed = set(indices_to_delete)
        keep = [index for index in range(src.page_count) if index not in doomed]
        if not keep:
            raise UserConstraintError(
                "You cannot delete all pages from the PDF.",
                details={"page_count": src.page_count},
            )
        logger.info("Deleting pages kept=%s of=%s", len(keep), src.page_count)
        return _copy_pages(src, keep)


@pdf_operation("Failed to reorder pages.")
def reorder_pages(data: bytes, order: list[int]) -> bytes:
    """Copy pages in ``order``; duplicates and omissions are taken as given."""
    with open_pdf(data) as src:
        _check_indices(order, src.page_count)
        if not order:
            raise UserConstraintError("Page order is empty.")
        return _copy_pages(src, order)
