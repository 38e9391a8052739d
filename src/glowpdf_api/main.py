from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from glowpdf_api.core.errors import APIError, RenderingEnvironmentError
from glowpdf_api.core.request_context import get_request_id
from glowpdf_api.routers.convert import router as convert_router
from glowpdf_api.routers.editor import router as editor_router
from glowpdf_api.routers.health import router as health_router
from glowpdf_api.routers.security import router as security_router
from glowpdf_api.routers.tools import router as tools_router
from glowpdf_api.services.renderer import RendererConfig, configure_renderer
from glowpdf_api.settings import get_settings


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
logging.basicConfig(level=getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger("glowpdf_api")


# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------
def _cors_origins() -> list[str]:
    settings = get_settings()
    if settings.WEB_ORIGIN:
        return [origin.strip() for origin in settings.WEB_ORIGIN.split(",") if origin.strip()]
    if settings.GLOWPDF_ENV.lower() == "production":
        return []
    return [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------
app = FastAPI(title="GlowPDF API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "Content-Disposition",
        "X-GlowPDF-Original-Size",
        "X-GlowPDF-Output-Size",
        "X-GlowPDF-Compression-Fallback",
        "X-Viewport-Width",
        "X-Viewport-Height",
    ],
)


# -----------------------------------------------------------------------------
# Exception handlers
# -----------------------------------------------------------------------------
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = get_request_id(request)
    logger.error(
        "Unhandled exception on %s %s request_id=%s\n%s",
        request.method,
        request.url.path,
        request_id,
        traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "path": request.url.path,
            "request_id": request_id,
        },
    )


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    request_id = get_request_id(request)
    logger.warning(
        "Handled API error on %s %s request_id=%s code=%s message=%s",
        request.method,
        request.url.path,
        request_id,
        exc.code,
        exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "details": exc.details,
            "request_id": request_id,
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = get_request_id(request)
    logger.info(
        "Validation error on %s %s request_id=%s",
        request.method,
        request.url.path,
        request_id,
    )
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "message": "Invalid request payload",
            "details": jsonable_errors(exc),
            "request_id": request_id,
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {key: value for key, value in error.items() if key in {"type", "loc", "msg"}}
        for error in exc.errors()
    ]


# -----------------------------------------------------------------------------
# Startup
# -----------------------------------------------------------------------------
@app.on_event("startup")
def startup_event() -> None:
    settings = get_settings()
    logger.info("GlowPDF API starting")
    logger.info("GLOWPDF_ENV=%s", settings.GLOWPDF_ENV)
    logger.info("GLOWPDF_MAX_UPLOAD_MB=%s", settings.GLOWPDF_MAX_UPLOAD_MB)
    try:
        configure_renderer(RendererConfig(display_errors=settings.GLOWPDF_RENDER_DISPLAY_ERRORS))
    except RenderingEnvironmentError as exc:
        # Rendering endpoints answer 503 until the environment is fixed.
        logger.error("Renderer initialization failed: %s", exc.message)


# -----------------------------------------------------------------------------
# Routers
# -----------------------------------------------------------------------------
app.include_router(health_router)
app.include_router(tools_router)
app.include_router(convert_router)
app.include_router(security_router)
app.include_router(editor_router)
