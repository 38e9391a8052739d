from __future__ import annotations

import logging

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from glowpdf_api.core.errors import APIError, UserConstraintError
from glowpdf_api.core.request_context import get_request_id
from glowpdf_api.schemas.annotations import AnnotationsPayload
from glowpdf_api.routers.uploads import (
    ZIP_MEDIA_TYPE,
    download_response,
    parse_index_list,
    read_upload,
    read_uploads,
)
from glowpdf_api.services.annotate import flatten_annotations
from glowpdf_api.services.archive import build_zip, download_name
from glowpdf_api.services.compress import CompressionConfig, compress_pdf, preset
from glowpdf_api.services.organize import delete_pages, merge_pdfs, reorder_pages, rotate_pdf, split_pdf
from glowpdf_api.services.stamp import add_page_numbers, add_watermark

router = APIRouter(prefix="/v1/tools", tags=["tools"])
logger = logging.getLogger("glowpdf_api")


@router.post("/merge")
async def merge(request: Request, files: list[UploadFile] = File(...)) -> Response:
    uploads = await read_uploads(files)
    logger.info("Merge request_id=%s files=%s", get_request_id(request), len(uploads))
    payload = await run_in_threadpool(merge_pdfs, uploads)
    return download_response(payload, download_name("merged"))


@router.post("/split")
async def split(file: UploadFile = File(...)) -> Response:
    data = await read_upload(file)
    pages = await run_in_threadpool(split_pdf, data, file.filename)
    return download_response(build_zip(pages), download_name("split-pages", extension="zip"), ZIP_MEDIA_TYPE)


@router.post("/rotate")
async def rotate(file: UploadFile = File(...), degrees: int = Form(...)) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(rotate_pdf, data, degrees)
    return download_response(payload, download_name("rotated", file.filename))


@router.post("/delete-pages")
async def delete(file: UploadFile = File(...), pages: str = Form(...)) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(delete_pages, data, parse_index_list(pages))
    return download_response(payload, download_name("deleted", file.filename))


@router.post("/reorder")
async def reorder(file: UploadFile = File(...), order: str = Form(...)) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(reorder_pages, data, parse_index_list(order))
    return download_response(payload, download_name("organized", file.filename))


@router.post("/compress")
async def compress(
    request: Request,
    file: UploadFile = File(...),
    level: str = Form(default="recommended"),
    quality: float | None = Form(default=None),
    scale: float | None = Form(default=None),
) -> Response:
    base = preset(level)
    config = CompressionConfig(
        quality=base.quality if quality is None else quality,
        scale=base.scale if scale is None else scale,
    ).validate()
    data = await read_upload(file)
    logger.info(
        "Compress request_id=%s quality=%s scale=%s size=%s",
        get_request_id(request),
        config.quality,
        config.scale,
        len(data),
    )
    result = await run_in_threadpool(compress_pdf, data, config)
    headers = {
        "X-GlowPDF-Original-Size": str(result.original_size),
        "X-GlowPDF-Output-Size": str(result.output_size),
        "X-GlowPDF-Compression-Fallback": "true" if result.fallback else "false",
    }
    return download_response(result.payload, download_name("compressed", file.filename), headers=headers)


@router.post("/watermark")
async def watermark(
    file: UploadFile = File(...),
    text: str = Form(...),
    opacity: float = Form(default=0.5),
    size: float = Form(default=50),
) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(add_watermark, data, text, opacity, size)
    return download_response(payload, download_name("watermarked", file.filename))


@router.post("/page-numbers")
async def page_numbers(
    file: UploadFile = File(...),
    position: str = Form(default="bottom-center"),
    start_from: int = Form(default=1),
) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(add_page_numbers, data, position, start_from)
    return download_response(payload, download_name("numbered", file.filename))


@router.post("/annotate")
async def annotate(file: UploadFile = File(...), annotations: str = Form(...)) -> Response:
    try:
        parsed = AnnotationsPayload.model_validate_json(annotations)
    except ValidationError as exc:
        raise APIError(
            status_code=400,
            code="invalid_annotations",
            message="Invalid annotations payload",
            details={
                "errors": [
                    {key: value for key, value in error.items() if key in {"type", "loc", "msg"}}
                    for error in exc.errors()
                ]
            },
        ) from exc
    try:
        session = parsed.to_session()
    except ValueError as exc:
        raise UserConstraintError(str(exc)) from exc
    data = await read_upload(file)
    payload = await run_in_threadpool(flatten_annotations, data, session)
    return download_response(payload, download_name("edited", file.filename))
