from __future__ import annotations

from fastapi import APIRouter

from glowpdf_api.services.renderer import renderer_ready
from glowpdf_api.settings import get_settings

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str | bool]:
    settings = get_settings()
    return {
        "status": "ok",
        "build_version": settings.GLOWPDF_BUILD_VERSION or "dev",
        "environment": settings.GLOWPDF_ENV,
        "renderer_ready": renderer_ready(),
    }
