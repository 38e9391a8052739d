from __future__ import annotations

import functools
import logging
from dataclasses import dataclass

import fitz

from glowpdf_api.core.errors import (
    CorruptedDocumentError,
    PDFError,
    PasswordProtectedError,
    RenderingEnvironmentError,
    UnknownPDFError,
)

logger = logging.getLogger("glowpdf_api")

MIN_PYMUPDF_VERSION = (1, 23, 0)


@dataclass(frozen=True)
class RendererConfig:
    display_errors: bool = False
    min_version: tuple[int, int, int] = MIN_PYMUPDF_VERSION


@dataclass(frozen=True)
class RendererState:
    config: RendererConfig
    version: str


_state: RendererState | None = None


def _parse_version(raw: str) -> tuple[int, ...]:
    parts = []
    for token in raw.split("."):
        digits = "".join(ch for ch in token if ch.isdigit())
        parts.append(int(digits or 0))
    return tuple(parts)


def configure_renderer(config: RendererConfig | None = None) -> RendererState:
    """Initialize the rasterizer once at host startup."""
    global _state
    config = config or RendererConfig()
    version = getattr(fitz, "VersionBind", "") or "0"
    if _parse_version(version) < config.min_version:
        raise RenderingEnvironmentError(
            f"PyMuPDF {version} is older than the supported minimum",
            details={"minimum": ".".join(str(part) for part in config.min_version)},
        )
    fitz.TOOLS.mupdf_display_errors(config.display_errors)
    _state = RendererState(config=config, version=version)
    logger.info("Renderer configured pymupdf=%s display_errors=%s", version, config.display_errors)
    return _state


def reset_renderer() -> None:
    global _state
    _state = None


def get_renderer() -> RendererState:
    if _state is None:
        raise RenderingEnvironmentError("PDF renderer is not initialized. Please retry shortly.")
    return _state


def renderer_ready() -> bool:
    return _state is not None


def classify_exception(exc: BaseException, default_message: str) -> PDFError:
    if isinstance(exc, PDFError):
        return exc
    if isinstance(exc, fitz.FileDataError):
        return CorruptedDocumentError("File appears corrupted or is not a valid PDF.")
    message = str(exc) or exc.__class__.__name__
    # Last resort for library errors that carry no type.
    lowered = message.lower()
    if "password" in lowered or "encrypt" in lowered:
        return PasswordProtectedError(
            "This file is password protected. Please unlock it using the Unlock PDF tool or enter the password."
        )
    if "format error" in lowered or "no objects found" in lowered:
        return CorruptedDocumentError("File appears corrupted or is not a valid PDF.")
    return UnknownPDFError(f"{default_message} {message}")


def pdf_operation(default_message: str):
    """Re-raise anything a PDF operation throws as a classified PDFError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except PDFError:
                raise
            except (RuntimeError, ValueError, IndexError) as exc:
                logger.warning("%s failed: %s", func.__name__, exc)
                raise classify_exception(exc, default_message) from exc

        return wrapper

    return decorator


def open_pdf(data: bytes, password: str | None = None, filename: str | None = None) -> fitz.Document:
    details = {"filename": filename} if filename else None
    if not data:
        raise CorruptedDocumentError("File is empty.", details=details)
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except fitz.EmptyFileError as exc:
        raise CorruptedDocumentError("File is empty.", details=details) from exc
    except fitz.FileDataError as exc:
        raise CorruptedDocumentError("File appears corrupted or is not a valid PDF.", details=details) from exc
    except RuntimeError as exc:
        raise classify_exception(exc, "Failed to open PDF.") from exc
    if doc.needs_pass:
        if password is None or not doc.authenticate(password):
            doc.close()
            if filename:
                message = f'File "{filename}" is password protected. Please unlock it first.'
            else:
                message = "This file is password protected. Please unlock it using the Unlock PDF tool or enter the password."
            raise PasswordProtectedError(message, details=details)
    return doc


def render_page(page: fitz.Page, scale: float, alpha: bool = False) -> fitz.Pixmap:
    get_renderer()
    try:
        return page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=alpha)
    except (RuntimeError, MemoryError) as exc:
        raise RenderingEnvironmentError(
            f"Failed to render page {page.number + 1}.", details={"error": str(exc)}
        ) from exc


def encode_jpeg(pix: fitz.Pixmap, quality: float) -> bytes:
    try:
        return pix.tobytes("jpeg", jpg_quality=max(1, min(100, round(quality * 100))))
    except (RuntimeError, ValueError) as exc:
        raise RenderingEnvironmentError("JPEG encoding failed.", details={"error": str(exc)}) from exc
