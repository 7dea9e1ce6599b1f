# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import math

import pytest

from printforge.core.error import ConstructionError, MalformedPathError
from printforge.core.geometry import ClosePath, CurveTo, LineTo, MoveTo, Point, Shape, polyline


def pts(*rows):
    """(x, y, is_handle) triples -> (Point, bool) pairs."""
    return [(Point(x, y), h) for x, y, h in rows]


QUAD = pts((0, 0, False), (0, 50, False), (50, 50, False), (50, 0, False))


class TestPoint:

    def test_rejects_non_finite(self):
        with pytest.raises(ConstructionError):
            Point(math.nan, 0)
        with pytest.raises(ConstructionError):
            Point(0, math.inf)

    def test_rejects_non_numbers(self):
        with pytest.raises(ConstructionError):
            Point('1', 0)
        with pytest.raises(ConstructionError):
            Point(True, 0)

    def test_to_pt(self):
        x, y = Point(25.4, 0).to_pt()
        assert x == pytest.approx(72.0)
        assert y == 0


class TestSegments:

    def test_closed_quad_has_four_segments(self):
        shape = Shape(QUAD, closed=True, filled=True, stroked=True)
        elements = shape.segments()
        assert isinstance(elements[0], MoveTo)
        assert [type(e) for e in elements[1:]] == [LineTo, LineTo, LineTo, ClosePath]
        assert shape.segment_count() == 4

    def test_open_polyline_counts_only_drawn_edges(self):
        shape = polyline([Point(0, 0), Point(10, 0), Point(10, 10)])
        assert shape.segment_count() == 2

    def test_handle_pair_forms_curve(self):
        shape = Shape(pts((0, 0, False), (10, 20, True), (30, 20, True), (40, 0, False)))
        elements = shape.segments()
        assert len(elements) == 2
        curve = elements[1]
        assert isinstance(curve, CurveTo)
        assert curve.p1 == Point(10, 20)
        assert curve.p2 == Point(30, 20)
        assert curve.p3 == Point(40, 0)
        assert shape.segment_count() == 1

    def test_mixed_lines_and_curves(self):
        shape = Shape(pts((0, 0, False), (10, 0, False), (15, 5, True), (15, 10, True),
                          (10, 15, False), (0, 15, False)), closed=True)
        kinds = [type(e) for e in shape.segments()]
        assert kinds == [MoveTo, LineTo, CurveTo, LineTo, ClosePath]
        assert shape.segment_count() == 4

    def test_trailing_pair_closes_curve_to_first_point(self):
        shape = Shape(pts((0, 0, False), (10, 0, False), (10, 10, True), (0, 10, True)),
                      closed=True)
        elements = shape.segments()
        assert isinstance(elements[-2], CurveTo)
        assert elements[-2].p3 == Point(0, 0)
        # The trailing curve is the closing edge; it is not counted twice
        assert shape.segment_count() == 2

    @pytest.mark.parametrize('handles', [1, 3])
    def test_wrong_handle_count_is_malformed(self, handles):
        rows = [(0, 0, False)] + [(i + 1, i + 1, True) for i in range(handles)] + [(20, 0, False)]
        with pytest.raises(MalformedPathError):
            Shape(pts(*rows)).segments()

    def test_trailing_handles_on_open_shape_are_malformed(self):
        shape = Shape(pts((0, 0, False), (10, 0, False), (10, 10, True), (0, 10, True)))
        with pytest.raises(MalformedPathError):
            shape.segments()

    def test_single_trailing_handle_is_malformed(self):
        shape = Shape(pts((0, 0, False), (10, 0, False), (10, 10, True)), closed=True)
        with pytest.raises(MalformedPathError):
            shape.segments()

    def test_first_point_cannot_be_handle(self):
        with pytest.raises(MalformedPathError):
            Shape(pts((0, 0, True), (10, 0, False))).segments()

    def test_needs_two_points(self):
        with pytest.raises(ConstructionError):
            Shape(pts((0, 0, False))).segments()

    def test_malformed_path_is_a_construction_error(self):
        assert issubclass(MalformedPathError, ConstructionError)

    def test_rejects_bare_points(self):
        with pytest.raises(ConstructionError):
            Shape([Point(0, 0), Point(1, 1)])
