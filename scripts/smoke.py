from __future__ import annotations

import json
import os
import sys

import fitz
import httpx


def _make_smoke_pdf() -> bytes:
    doc = fitz.open()
    for label in ("Smoke page one", "Smoke page two"):
        page = doc.new_page(width=400, height=400)
        page.draw_rect(fitz.Rect(50, 50, 350, 200), color=(0.1, 0.3, 0.6), fill=(0.1, 0.3, 0.6))
        page.insert_text((70, 110), label, fontsize=14, color=(1, 1, 1))
    payload = doc.tobytes()
    doc.close()
    return payload


def main() -> int:
    base_url = os.getenv("GLOWPDF_SMOKE_API_BASE_URL", "http://localhost:8000").rstrip("/")
    client = httpx.Client(base_url=base_url, timeout=30)
    pdf_bytes = _make_smoke_pdf()

    health = client.get("/health")
    health.raise_for_status()
    if not health.json().get("renderer_ready"):
        print("renderer not ready", file=sys.stderr)
        return 1

    merge = client.post(
        "/v1/tools/merge",
        files=[
            ("files", ("a.pdf", pdf_bytes, "application/pdf")),
            ("files", ("b.pdf", pdf_bytes, "application/pdf")),
        ],
    )
    merge.raise_for_status()

    compress = client.post(
        "/v1/tools/compress",
        files={"file": ("smoke.pdf", pdf_bytes, "application/pdf")},
        data={"level": "extreme"},
    )
    compress.raise_for_status()

    session = client.post(
        "/v1/editor/sessions",
        files={"file": ("smoke.pdf", pdf_bytes, "application/pdf")},
    )
    session.raise_for_status()
    session_id = session.json()["session_id"]

    render = client.get(f"/v1/editor/sessions/{session_id}/pages/0/render")
    render.raise_for_status()
    stroke = client.post(
        f"/v1/editor/sessions/{session_id}/strokes",
        json={
            "page_index": 0,
            "points": [{"x": 10, "y": 10}, {"x": 120, "y": 90}],
            "color": "#ff0000",
            "width": 3,
            "viewport_width": int(render.headers["x-viewport-width"]),
            "viewport_height": int(render.headers["x-viewport-height"]),
        },
    )
    stroke.raise_for_status()

    saved = client.post(f"/v1/editor/sessions/{session_id}/save")
    saved.raise_for_status()
    if not saved.content.startswith(b"%PDF"):
        raise RuntimeError("Save did not return PDF bytes")
    client.delete(f"/v1/editor/sessions/{session_id}").raise_for_status()

    print(
        json.dumps(
            {
                "status": "ok",
                "merged_bytes": len(merge.content),
                "compression_fallback": compress.headers.get("x-glowpdf-compression-fallback"),
            }
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
