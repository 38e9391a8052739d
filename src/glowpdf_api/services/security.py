from __future__ import annotations

import logging

import fitz

from glowpdf_api.core.errors import PasswordProtectedError, UserConstraintError
from glowpdf_api.services.renderer import open_pdf, pdf_operation

logger = logging.getLogger("glowpdf_api")


@pdf_operation("Failed to unlock PDF.")
def unlock_pdf(data: bytes, password: str | None = None) -> bytes:
    """Return the document saved without encryption."""
    try:
        doc = open_pdf(data, password=password or None)
    except PasswordProtectedError as exc:
        message = "Incorrect password. Please try again." if password else exc.message
        raise PasswordProtectedError(message) from exc
    with doc:
        return doc.tobytes(garbage=3, deflate=True, encryption=fitz.PDF_ENCRYPT_NONE)


@pdf_operation("Failed to protect PDF.")
def protect_pdf(data: bytes, password: str, owner_password: str | None = None) -> bytes:
    if not password:
        raise UserConstraintError("A password is required to protect the PDF.")
    with open_pdf(data) as doc:
        logger.info("Encrypting pages=%s", doc.page_count)
        return doc.tobytes(
            garbage=3,
            deflate=True,
            encryption=fitz.PDF_ENCRYPT_AES_256,
            user_pw=password,
            owner_pw=owner_password or password,
        )
