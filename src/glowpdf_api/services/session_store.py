from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from glowpdf_api.core.annotations.model import AnnotationSession
from glowpdf_api.core.errors import APIError, UserConstraintError
from glowpdf_api.services.renderer import open_pdf
from glowpdf_api.settings import get_settings

logger = logging.getLogger("glowpdf_api")


@dataclass
class EditSession:
    session_id: str
    filename: str
    source: bytes
    page_sizes: list[tuple[float, float]]
    annotations: AnnotationSession = field(default_factory=AnnotationSession)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def page_count(self) -> int:
        return len(self.page_sizes)

    def check_page(self, page_index: int) -> None:
        if page_index < 0 or page_index >= self.page_count:
            raise UserConstraintError(
                "Page does not exist.", details={"page_index": page_index, "page_count": self.page_count}
            )


_sessions: dict[str, EditSession] = {}
_registry_lock = threading.Lock()


def create_session(data: bytes, filename: str) -> EditSession:
    with open_pdf(data) as doc:
        page_sizes = [(page.rect.width, page.rect.height) for page in doc]
    session = EditSession(session_id=str(uuid4()), filename=filename, source=data, page_sizes=page_sizes)
    limit = get_settings().GLOWPDF_MAX_SESSIONS
    with _registry_lock:
        if len(_sessions) >= limit:
            # Oldest first; dicts keep insertion order.
            evicted = next(iter(_sessions))
            del _sessions[evicted]
            logger.info("Evicted edit session session_id=%s", evicted)
        _sessions[session.session_id] = session
    logger.info("Created edit session session_id=%s pages=%s", session.session_id, session.page_count)
    return session


def get_session(session_id: str) -> EditSession:
    with _registry_lock:
        session = _sessions.get(session_id)
    if session is None:
        raise APIError(
            status_code=404,
            code="session_not_found",
            message="Editing session not found",
            details={"session_id": session_id},
        )
    return session


def discard_session(session_id: str) -> None:
    with _registry_lock:
        session = _sessions.pop(session_id, None)
    if session is None:
        raise APIError(
            status_code=404,
            code="session_not_found",
            message="Editing session not found",
            details={"session_id": session_id},
        )
    session.annotations.discard()


def clear_sessions() -> None:
    with _registry_lock:
        _sessions.clear()
