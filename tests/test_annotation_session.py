from __future__ import annotations

import pytest

from glowpdf_api.core.annotations.model import AnnotationSession, Stroke, TextAnnotation
from glowpdf_api.core.geometry.mapping import Point


def _draw(session: AnnotationSession, page_index: int, points: list[tuple[float, float]], color: str = "#ff0000") -> Stroke:
    handle = session.begin_stroke(page_index, color, 3, 1.0, viewport=(612, 792))
    for x, y in points:
        session.append_point(handle, Point(x, y))
    return session.commit_stroke(handle)


def test_undo_removes_strokes_before_texts() -> None:
    session = AnnotationSession()
    _draw(session, 0, [(0, 0), (10, 10)])
    session.place_text(0, 5, 5, "later text")

    removed = session.undo_last(0)
    assert isinstance(removed, Stroke)
    bucket = session.get_bucket(0)
    assert bucket is not None
    assert bucket.strokes == []
    assert [text.text for text in bucket.texts] == ["later text"]

    removed = session.undo_last(0)
    assert isinstance(removed, TextAnnotation)
    assert session.undo_last(0) is None


def test_undo_on_untouched_page_is_noop() -> None:
    session = AnnotationSession()
    assert session.undo_last(3) is None


def test_commit_refreshes_viewport_and_zero_keeps_previous() -> None:
    session = AnnotationSession()
    handle = session.begin_stroke(0, "#000000", 3, 1.0, viewport=(800, 1000))
    session.append_point(handle, Point(1, 1))
    session.commit_stroke(handle, viewport=(400, 500))
    bucket = session.get_bucket(0)
    assert (bucket.viewport_width, bucket.viewport_height) == (400, 500)

    session.set_viewport(0, 0, 0)
    assert (bucket.viewport_width, bucket.viewport_height) == (400, 500)


def test_stroke_points_keep_input_order() -> None:
    session = AnnotationSession()
    stroke = _draw(session, 1, [(0, 0), (5, 1), (9, 3)])
    assert [(point.x, point.y) for point in stroke.points] == [(0, 0), (5, 1), (9, 3)]


def test_colors_are_normalized_and_validated() -> None:
    session = AnnotationSession()
    stroke = _draw(session, 0, [(0, 0), (1, 1)], color="#FF00AA")
    assert stroke.color == "#ff00aa"
    with pytest.raises(ValueError):
        session.begin_stroke(0, "red", 3, 1.0)
    with pytest.raises(ValueError):
        session.place_text(0, 1, 1, "hi", color="#12345")


@pytest.mark.parametrize(("width", "opacity"), [(0, 1.0), (-2, 1.0), (3, 1.5), (3, -0.1)])
def test_invalid_stroke_style_rejected(width: float, opacity: float) -> None:
    with pytest.raises(ValueError):
        AnnotationSession().begin_stroke(0, "#000000", width, opacity)


def test_blank_text_rejected() -> None:
    session = AnnotationSession()
    with pytest.raises(ValueError):
        session.place_text(0, 1, 1, "   ")
    with pytest.raises(ValueError):
        session.place_text(0, 1, 1, "ok", size=0)


def test_unknown_or_committed_handle_rejected() -> None:
    session = AnnotationSession()
    handle = session.begin_stroke(0, "#000000", 3, 1.0)
    session.commit_stroke(handle)
    with pytest.raises(ValueError):
        session.append_point(handle, Point(1, 1))
    with pytest.raises(ValueError):
        session.commit_stroke(handle)


def test_clear_page_and_items_order() -> None:
    session = AnnotationSession()
    _draw(session, 2, [(0, 0), (1, 1)])
    session.place_text(0, 1, 1, "first page")
    assert [page_index for page_index, _ in session.items()] == [0, 2]

    session.clear_page(2)
    assert session.get_bucket(2).is_empty()
    assert not session.is_empty()
    session.clear_page(0)
    assert session.is_empty()
