from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import fitz

from glowpdf_api.core.errors import UserConstraintError
from glowpdf_api.services.organize import save_pdf
from glowpdf_api.services.renderer import encode_jpeg, open_pdf, pdf_operation, render_page

logger = logging.getLogger("glowpdf_api")


@dataclass(frozen=True)
class CompressionConfig:
    quality: float
    scale: float

    def validate(self) -> "CompressionConfig":
        if not (math.isfinite(self.quality) and 0 < self.quality <= 1):
            raise UserConstraintError("Compression quality must be in (0, 1].", details={"quality": self.quality})
        if not (math.isfinite(self.scale) and self.scale > 0):
            raise UserConstraintError("Compression scale must be positive.", details={"scale": self.scale})
        return self


PRESETS: dict[str, CompressionConfig] = {
    "recommended": CompressionConfig(quality=0.7, scale=1.0),
    "extreme": CompressionConfig(quality=0.5, scale=0.7),
}


def preset(name: str) -> CompressionConfig:
    try:
        return PRESETS[name.lower()]
    except KeyError:
        raise UserConstraintError(
            f"Unknown compression level {name!r}.", details={"levels": sorted(PRESETS)}
        ) from None


@dataclass(frozen=True)
class CompressionResult:
    """Outcome of a rasterizing pass.

    Every rasterized page loses selectable text, vector drawings, links and
    bookmarks. When ``fallback`` is set the original bytes were returned
    untouched because the rasterized document was not smaller.
    """

    payload: bytes
    original_size: int
    rasterized_size: int
    page_count: int
    config: CompressionConfig
    fallback: bool

    @property
    def output_size(self) -> int:
        return len(self.payload)


@pdf_operation("Failed to compress PDF.")
def compress_pdf(data: bytes, config: CompressionConfig = PRESETS["recommended"]) -> CompressionResult:
    config.validate()
    out = fitz.open()
    try:
        with open_pdf(data) as src:
            for page in src:
                pix = render_page(page, config.scale)
                jpeg = encode_jpeg(pix, config.quality)
                # Pixel dimensions double as page units at 1:1.
                new_page = out.new_page(width=pix.width, height=pix.height)
                new_page.insert_image(new_page.rect, stream=jpeg)
            page_total = src.page_count
        rasterized = save_pdf(out)
    finally:
        out.close()

    if len(rasterized) >= len(data):
        logger.warning(
            "Compression resulted in larger file, returning original original=%s rasterized=%s",
            len(data),
            len(rasterized),
        )
        payload, fallback = data, True
    else:
        payload, fallback = rasterized, False
    logger.info(
        "Compressed pages=%s quality=%s scale=%s original=%s output=%s",
        page_total,
        config.quality,
        config.scale,
        len(data),
        len(payload),
    )
    return CompressionResult(
        payload=payload,
        original_size=len(data),
        rasterized_size=len(rasterized),
        page_count=page_total,
        config=config,
        fallback=fallback,
    )
