from __future__ import annotations

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from glowpdf_api.routers.uploads import download_response, read_upload
from glowpdf_api.services.archive import download_name
from glowpdf_api.services.security import protect_pdf, unlock_pdf

router = APIRouter(prefix="/v1/security", tags=["security"])


@router.post("/unlock")
async def unlock(file: UploadFile = File(...), password: str | None = Form(default=None)) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(unlock_pdf, data, password)
    return download_response(payload, download_name("unlocked", file.filename))


@router.post("/protect")
async def protect(file: UploadFile = File(...), password: str = Form(...)) -> Response:
    data = await read_upload(file)
    payload = await run_in_threadpool(protect_pdf, data, password)
    return download_response(payload, download_name("protected", file.filename))
