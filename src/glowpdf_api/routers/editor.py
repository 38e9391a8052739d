from __future__ import annotations

import logging

from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from glowpdf_api.core.annotations.model import HIGHLIGHTER
from glowpdf_api.core.errors import UserConstraintError
from glowpdf_api.core.request_context import get_request_id
from glowpdf_api.routers.uploads import download_response, read_upload
from glowpdf_api.schemas.annotations import BucketResponse, EditorStrokeRequest, EditorTextRequest, add_stroke
from glowpdf_api.schemas.api import EditSessionResponse, PageSize
from glowpdf_api.services.annotate import flatten_annotations
from glowpdf_api.services.archive import download_name
from glowpdf_api.services.convert import render_page_image
from glowpdf_api.services.session_store import (
    EditSession,
    create_session,
    discard_session,
    get_session,
)
from glowpdf_api.settings import get_settings

router = APIRouter(prefix="/v1/editor", tags=["editor"])
logger = logging.getLogger("glowpdf_api")


def _session_response(session: EditSession) -> EditSessionResponse:
    return EditSessionResponse(
        session_id=session.session_id,
        filename=session.filename,
        page_count=session.page_count,
        pages=[PageSize(width_pt=width, height_pt=height) for width, height in session.page_sizes],
        created_at=session.created_at,
    )


def _bucket_response(session: EditSession, page_index: int) -> BucketResponse:
    return BucketResponse.from_bucket(page_index, session.annotations.get_bucket(page_index))


@router.post("/sessions", response_model=EditSessionResponse)
async def open_session(request: Request, file: UploadFile = File(...)) -> EditSessionResponse:
    data = await read_upload(file)
    session = await run_in_threadpool(create_session, data, file.filename or "document.pdf")
    logger.info("Editor session opened request_id=%s session_id=%s", get_request_id(request), session.session_id)
    return _session_response(session)


@router.get("/sessions/{session_id}", response_model=EditSessionResponse)
def read_session(session_id: str) -> EditSessionResponse:
    return _session_response(get_session(session_id))


@router.get("/sessions/{session_id}/pages/{page_index}/render")
def render_session_page(
    session_id: str,
    page_index: int,
    scale: float | None = Query(default=None, gt=0, le=8),
) -> Response:
    session = get_session(session_id)
    session.check_page(page_index)
    rendered = render_page_image(session.source, page_index, scale or get_settings().GLOWPDF_EDITOR_RENDER_SCALE)
    # Clients echo these back as the capture viewport.
    return Response(
        content=rendered.data,
        media_type="image/png",
        headers={
            "X-Viewport-Width": str(rendered.width),
            "X-Viewport-Height": str(rendered.height),
        },
    )


@router.get("/sessions/{session_id}/pages/{page_index}", response_model=BucketResponse)
def read_bucket(session_id: str, page_index: int) -> BucketResponse:
    session = get_session(session_id)
    session.check_page(page_index)
    return _bucket_response(session, page_index)


@router.post("/sessions/{session_id}/strokes", response_model=BucketResponse)
def add_session_stroke(session_id: str, payload: EditorStrokeRequest) -> BucketResponse:
    session = get_session(session_id)
    session.check_page(payload.page_index)
    if payload.tool == "highlighter":
        payload = payload.model_copy(
            update={"color": HIGHLIGHTER.color, "width": HIGHLIGHTER.width, "opacity": HIGHLIGHTER.opacity}
        )
    with session.lock:
        try:
            add_stroke(
                session.annotations,
                payload.page_index,
                payload,
                viewport=(payload.viewport_width, payload.viewport_height),
            )
        except ValueError as exc:
            raise UserConstraintError(str(exc)) from exc
        return _bucket_response(session, payload.page_index)


@router.post("/sessions/{session_id}/texts", response_model=BucketResponse)
def add_session_text(session_id: str, payload: EditorTextRequest) -> BucketResponse:
    session = get_session(session_id)
    session.check_page(payload.page_index)
    with session.lock:
        try:
            session.annotations.place_text(
                payload.page_index,
                payload.x,
                payload.y,
                payload.text,
                payload.size,
                payload.color,
                viewport=(payload.viewport_width, payload.viewport_height),
            )
        except ValueError as exc:
            raise UserConstraintError(str(exc)) from exc
        return _bucket_response(session, payload.page_index)


@router.post("/sessions/{session_id}/pages/{page_index}/undo", response_model=BucketResponse)
def undo(session_id: str, page_index: int) -> BucketResponse:
    session = get_session(session_id)
    session.check_page(page_index)
    with session.lock:
        session.annotations.undo_last(page_index)
        return _bucket_response(session, page_index)


@router.delete("/sessions/{session_id}/pages/{page_index}", response_model=BucketResponse)
def clear_page(session_id: str, page_index: int) -> BucketResponse:
    session = get_session(session_id)
    session.check_page(page_index)
    with session.lock:
        session.annotations.clear_page(page_index)
        return _bucket_response(session, page_index)


@router.post("/sessions/{session_id}/save")
def save_session(session_id: str, request: Request) -> Response:
    session = get_session(session_id)
    with session.lock:
        payload = flatten_annotations(session.source, session.annotations)
    logger.info("Editor session saved request_id=%s session_id=%s", get_request_id(request), session_id)
    return download_response(payload, download_name("edited", session.filename))


@router.delete("/sessions/{session_id}", status_code=204)
def close_session(session_id: str) -> Response:
    discard_session(session_id)
    return Response(status_code=204)
