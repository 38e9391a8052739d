from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    GLOWPDF_ENV: str = "development"
    GLOWPDF_MAX_UPLOAD_MB: int = 50
    GLOWPDF_PREVIEW_MAX_PAGES: int = 50
    GLOWPDF_EDITOR_RENDER_SCALE: float = 1.2
    GLOWPDF_IMAGE_EXPORT_SCALE: float = 2.0
    GLOWPDF_IMAGE_EXPORT_QUALITY: float = 0.9
    GLOWPDF_RENDER_DISPLAY_ERRORS: bool = False
    GLOWPDF_MAX_SESSIONS: int = 64
    GLOWPDF_BUILD_VERSION: Optional[str] = None
    WEB_ORIGIN: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    @model_validator(mode="after")
    def _validate_render(self) -> "Settings":
        invalid = [
            name
            for name, value in {
                "GLOWPDF_EDITOR_RENDER_SCALE": self.GLOWPDF_EDITOR_RENDER_SCALE,
                "GLOWPDF_IMAGE_EXPORT_SCALE": self.GLOWPDF_IMAGE_EXPORT_SCALE,
            }.items()
            if value <= 0
        ]
        if not 0 < self.GLOWPDF_IMAGE_EXPORT_QUALITY <= 1:
            invalid.append("GLOWPDF_IMAGE_EXPORT_QUALITY")
        if self.GLOWPDF_MAX_UPLOAD_MB <= 0:
            invalid.append("GLOWPDF_MAX_UPLOAD_MB")
        if self.GLOWPDF_MAX_SESSIONS < 1:
            invalid.append("GLOWPDF_MAX_SESSIONS")
        if invalid:
            raise ValueError(f"Invalid settings: {', '.join(invalid)}")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
