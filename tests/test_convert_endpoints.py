from __future__ import annotations

import base64
import zipfile
from io import BytesIO

from fastapi.testclient import TestClient

from glowpdf_api.settings import get_settings
from tests.pdf_factory import (
    make_contract_pdf_bytes,
    make_encrypted_pdf_bytes,
    make_jpeg_bytes,
    make_png_bytes,
    make_text_pdf_bytes,
    page_sizes,
)


def test_pdf_to_images_endpoint(client: TestClient) -> None:
    response = client.post(
        "/v1/convert/pdf-to-images",
        files={"file": ("slides.pdf", make_text_pdf_bytes(["S1", "S2"]), "application/pdf")},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    with zipfile.ZipFile(BytesIO(response.content)) as archive:
        assert archive.namelist() == ["slides_page_1.jpg", "slides_page_2.jpg"]
        assert archive.read("slides_page_1.jpg").startswith(b"\xff\xd8\xff")


def test_images_to_pdf_endpoint(client: TestClient) -> None:
    response = client.post(
        "/v1/convert/images-to-pdf",
        files=[
            ("files", ("one.png", make_png_bytes(20, 10), "image/png")),
            ("files", ("two.jpg", make_jpeg_bytes(30, 40), "image/jpeg")),
        ],
    )
    assert response.status_code == 200
    assert page_sizes(response.content) == [(20, 10), (30, 40)]


def test_images_to_pdf_rejects_non_images(client: TestClient) -> None:
    response = client.post(
        "/v1/convert/images-to-pdf",
        files=[("files", ("notes.txt", b"hello", "text/plain"))],
    )
    assert response.status_code == 400


def test_pdf_to_word_endpoint(client: TestClient) -> None:
    response = client.post(
        "/v1/convert/pdf-to-word",
        files={"file": ("contract.pdf", make_contract_pdf_bytes(), "application/pdf")},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert response.headers["content-disposition"] == 'attachment; filename="contract.docx"'
    assert response.content.startswith(b"PK")


def test_preview_and_thumbnails(client: TestClient) -> None:
    source = make_text_pdf_bytes(["P1", "P2"])
    preview = client.post("/v1/convert/preview", files={"file": ("doc.pdf", source, "application/pdf")})
    assert preview.status_code == 200
    assert preview.headers["content-type"] == "image/jpeg"

    thumbnails = client.post("/v1/convert/thumbnails", files={"file": ("doc.pdf", source, "application/pdf")})
    assert thumbnails.status_code == 200
    payload = thumbnails.json()
    assert payload["page_count"] == 2
    assert all(base64.b64decode(item).startswith(b"\xff\xd8\xff") for item in payload["thumbnails"])


def test_unlock_and_protect_endpoints(client: TestClient) -> None:
    locked = make_encrypted_pdf_bytes("open-sesame")
    wrong = client.post(
        "/v1/security/unlock",
        files={"file": ("locked.pdf", locked, "application/pdf")},
        data={"password": "nope"},
    )
    assert wrong.status_code == 423
    assert wrong.json()["message"] == "Incorrect password. Please try again."

    unlocked = client.post(
        "/v1/security/unlock",
        files={"file": ("locked.pdf", locked, "application/pdf")},
        data={"password": "open-sesame"},
    )
    assert unlocked.status_code == 200
    assert unlocked.headers["content-disposition"] == 'attachment; filename="unlocked-locked.pdf"'

    protected = client.post(
        "/v1/security/protect",
        files={"file": ("plain.pdf", unlocked.content, "application/pdf")},
        data={"password": "again"},
    )
    assert protected.status_code == 200
    relocked = client.post(
        "/v1/tools/rotate",
        files={"file": ("plain.pdf", protected.content, "application/pdf")},
        data={"degrees": "90"},
    )
    assert relocked.status_code == 423


def test_upload_limit(client: TestClient, monkeypatch) -> None:
    monkeypatch.setenv("GLOWPDF_MAX_UPLOAD_MB", "1")
    get_settings.cache_clear()
    try:
        response = client.post(
            "/v1/tools/split",
            files={"file": ("big.pdf", b"%PDF" + b"0" * (1024 * 1024 + 1), "application/pdf")},
        )
    finally:
        monkeypatch.delenv("GLOWPDF_MAX_UPLOAD_MB")
        get_settings.cache_clear()
    assert response.status_code == 413
