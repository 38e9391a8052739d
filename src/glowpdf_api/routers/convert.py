from __future__ import annotations

import base64

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from glowpdf_api.routers.uploads import DOCX_MEDIA_TYPE, ZIP_MEDIA_TYPE, download_response, read_upload, read_uploads
from glowpdf_api.schemas.api import ThumbnailsResponse
from glowpdf_api.services.archive import build_zip, download_name, file_stem
from glowpdf_api.services.convert import first_page_preview, images_to_pdf, page_thumbnails, pdf_to_images, pdf_to_word
from glowpdf_api.settings import get_settings

router = APIRouter(prefix="/v1/convert", tags=["convert"])


@router.post("/pdf-to-images")
async def convert_pdf_to_images(file: UploadFile = File(...)) -> Response:
    settings = get_settings()
    data = await read_upload(file)
    images = await run_in_threadpool(
        pdf_to_images,
        data,
        file.filename,
        settings.GLOWPDF_IMAGE_EXPORT_SCALE,
        settings.GLOWPDF_IMAGE_EXPORT_QUALITY,
    )
    return download_response(build_zip(images), download_name("converted-images", extension="zip"), ZIP_MEDIA_TYPE)


@router.post("/images-to-pdf")
async def convert_images_to_pdf(files: list[UploadFile] = File(...)) -> Response:
    uploads = await read_uploads(files)
    payload = await run_in_threadpool(images_to_pdf, uploads)
    return download_response(payload, download_name("images"))


@router.post("/pdf-to-word")
async def convert_pdf_to_word(file: UploadFile = File(...)) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(pdf_to_word, data)
    filename = f"{file_stem(file.filename, default='converted-document')}.docx"
    return download_response(payload, filename, DOCX_MEDIA_TYPE)


@router.post("/preview")
async def preview(file: UploadFile = File(...)) -> Response:
    data = await read_upload(file)
    rendered = await run_in_threadpool(first_page_preview, data)
    return Response(content=rendered.data, media_type="image/jpeg")


@router.post("/thumbnails", response_model=ThumbnailsResponse)
async def thumbnails(file: UploadFile = File(...)) -> ThumbnailsResponse:
    data = await read_upload(file)
    images = await run_in_threadpool(page_thumbnails, data, get_settings().GLOWPDF_PREVIEW_MAX_PAGES)
    return ThumbnailsResponse(
        page_count=len(images),
        thumbnails=[base64.b64encode(image).decode("ascii") if image else "" for image in images],
    )
