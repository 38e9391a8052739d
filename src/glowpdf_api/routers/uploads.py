from __future__ import annotations

from io import BytesIO

from fastapi import HTTPException, UploadFile
from fastapi.responses import StreamingResponse

from glowpdf_api.core.errors import UserConstraintError
from glowpdf_api.services.archive import NamedFile
from glowpdf_api.settings import get_settings

PDF_MEDIA_TYPE = "application/pdf"
ZIP_MEDIA_TYPE = "application/zip"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


async def read_upload(file: UploadFile) -> bytes:
    # Content types are advisory; the parser decides what is a PDF.
    content = await file.read()
    max_bytes = get_settings().GLOWPDF_MAX_UPLOAD_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(status_code=413, detail="File exceeds upload limit")
    return content


async def read_uploads(files: list[UploadFile]) -> list[NamedFile]:
    return [NamedFile(filename=file.filename or "upload", data=await read_upload(file)) for file in files]


def parse_index_list(raw: str) -> list[int]:
    """Parse ``"0, 2,3"`` (or ``"[0,2,3]"``) into 0-based page indices."""
    cleaned = raw.strip().strip("[]")
    if not cleaned:
        return []
    try:
        return [int(token) for token in cleaned.split(",") if token.strip()]
    except ValueError as exc:
        raise UserConstraintError("Page list must be comma-separated integers.", details={"value": raw}) from exc


def download_response(
    payload: bytes,
    filename: str,
    media_type: str = PDF_MEDIA_TYPE,
    headers: dict[str, str] | None = None,
) -> StreamingResponse:
    safe_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    merged = {
        "Content-Disposition": f'attachment; filename="{safe_name}"',
        "Content-Length": str(len(payload)),
    }
    merged.update(headers or {})
    return StreamingResponse(BytesIO(payload), media_type=media_type, headers=merged)
