from __future__ import annotations

import pytest

from glowpdf_api.core.annotations.model import PageAnnotationBucket, Stroke, TextAnnotation
from glowpdf_api.core.annotations.render import LineCommand, TextCommand, build_render_commands
from glowpdf_api.core.geometry.mapping import Point


def test_stroke_becomes_consecutive_segments_then_text() -> None:
    bucket = PageAnnotationBucket(
        strokes=[Stroke(points=[Point(0, 0), Point(10, 0), Point(10, 10)], color="#ff0000", width=2, opacity=0.5)],
        texts=[TextAnnotation(x=0, y=0, text="note", size=10, color="#0000ff")],
        viewport_width=306,
        viewport_height=396,
    )
    commands = build_render_commands(bucket, 612, 792)

    assert [type(command) for command in commands] == [LineCommand, LineCommand, TextCommand]
    first, second, text = commands
    assert first.start == pytest.approx((0, 792))
    assert first.end == pytest.approx((20, 792))
    assert second.start == first.end
    assert second.end == pytest.approx((20, 772))
    assert first.color == (1.0, 0.0, 0.0)
    assert first.width == pytest.approx(4)
    assert first.opacity == 0.5
    assert first.round_cap is True

    assert text.text == "note"
    assert text.size == pytest.approx(20)
    assert text.origin == pytest.approx((0, 792 - 16))
    assert text.color == (0.0, 0.0, 1.0)


def test_single_point_stroke_draws_nothing() -> None:
    bucket = PageAnnotationBucket(
        strokes=[Stroke(points=[Point(5, 5)], color="#000000", width=3, opacity=1.0)],
        viewport_width=612,
        viewport_height=792,
    )
    assert build_render_commands(bucket, 612, 792) == []


def test_strokes_keep_commit_order() -> None:
    bucket = PageAnnotationBucket(
        strokes=[
            Stroke(points=[Point(0, 0), Point(1, 1)], color="#111111", width=1, opacity=1.0),
            Stroke(points=[Point(2, 2), Point(3, 3)], color="#222222", width=1, opacity=1.0),
        ],
    )
    commands = build_render_commands(bucket, 100, 100)
    assert [command.start for command in commands] == [(0, 100), (2, 98)]
