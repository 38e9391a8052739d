from __future__ import annotations

import pytest
from pydantic import ValidationError

from glowpdf_api.core.errors import APIError, PasswordProtectedError, UserConstraintError
from glowpdf_api.services.session_store import clear_sessions, create_session, discard_session, get_session
from glowpdf_api.settings import get_settings
from tests.pdf_factory import make_encrypted_pdf_bytes, make_mixed_size_pdf_bytes, make_text_pdf_bytes


@pytest.fixture(autouse=True)
def empty_store():
    clear_sessions()
    yield
    clear_sessions()


def test_session_records_page_sizes() -> None:
    session = create_session(make_mixed_size_pdf_bytes(), "mixed.pdf")
    assert session.page_sizes == [(612, 792), (842, 595), (300, 300)]
    assert get_session(session.session_id) is session
    session.check_page(2)
    with pytest.raises(UserConstraintError):
        session.check_page(3)


def test_locked_documents_cannot_open_sessions() -> None:
    with pytest.raises(PasswordProtectedError):
        create_session(make_encrypted_pdf_bytes(), "locked.pdf")


def test_oldest_session_is_evicted(monkeypatch) -> None:
    monkeypatch.setenv("GLOWPDF_MAX_SESSIONS", "2")
    get_settings.cache_clear()
    try:
        first = create_session(make_text_pdf_bytes(), "1.pdf")
        second = create_session(make_text_pdf_bytes(), "2.pdf")
        third = create_session(make_text_pdf_bytes(), "3.pdf")
    finally:
        monkeypatch.delenv("GLOWPDF_MAX_SESSIONS")
        get_settings.cache_clear()

    with pytest.raises(APIError) as exc_info:
        get_session(first.session_id)
    assert exc_info.value.status_code == 404
    assert get_session(second.session_id) is second
    assert get_session(third.session_id) is third


def test_discard_twice_is_not_found() -> None:
    session = create_session(make_text_pdf_bytes(), "doc.pdf")
    discard_session(session.session_id)
    with pytest.raises(APIError):
        discard_session(session.session_id)


def test_zero_session_limit_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("GLOWPDF_MAX_SESSIONS", "0")
    get_settings.cache_clear()
    try:
        with pytest.raises(ValidationError):
            create_session(make_text_pdf_bytes(), "doc.pdf")
    finally:
        monkeypatch.delenv("GLOWPDF_MAX_SESSIONS")
        get_settings.cache_clear()
