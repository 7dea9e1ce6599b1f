# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Geometry primitives: points, path elements and shapes.

Coordinates are in millimeters with the origin at the bottom-left corner of
the page, which is the PDF convention. Text placement is the exception and
converts from a top-left origin itself (see content_stream.py).
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Union

from .error import ConstructionError, MalformedPathError
from .units import mm_to_pt

Number = Union[int, float]


def _finite(name: str, value: Number) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConstructionError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ConstructionError(f"{name} must be finite, got {value!r}")
    return value


class Point(object):
    """A position in millimeters."""

    __slots__ = ('x', 'y')

    def __init__(self, x: Number, y: Number) -> None:
        self.x = _finite('x', x)
        self.y = _finite('y', y)

    def to_pt(self) -> tuple[float, float]:
        return mm_to_pt(self.x), mm_to_pt(self.y)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Point) and (self.x, self.y) == (other.x, other.y)

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __repr__(self) -> str:
        return f'Point({self.x!r}, {self.y!r})'


class MoveTo(object):
    __slots__ = ('p',)

    def __init__(self, p: Point) -> None:
        self.p = p


class LineTo(object):
    __slots__ = ('p',)

    def __init__(self, p: Point) -> None:
        self.p = p


class CurveTo(object):
    __slots__ = ('p1', 'p2', 'p3')

    def __init__(self, p1: Point, p2: Point, p3: Point) -> None:
        self.p1 = p1
        self.p2 = p2
        self.p3 = p3


class ClosePath(object):
    __slots__ = ()


class Shape(object):
    """
    An outline built from (Point, is_bezier_handle) pairs.

    Handle points come in pairs and act as the two control points of a
    cubic Bezier ending at the next non-handle point. A closed shape may end
    with one trailing pair, which curves back to the first point.
    """

    __slots__ = ('points', 'closed', 'filled', 'stroked')

    def __init__(self, points: Iterable[tuple[Point, bool]], closed: bool = False,
                 filled: bool = False, stroked: bool = True) -> None:
        pairs = []
        for entry in points:
            try:
                point, is_handle = entry
            except (TypeError, ValueError):
                raise ConstructionError(
                    f"shape points must be (Point, is_bezier_handle) pairs, got {entry!r}")
            if not isinstance(point, Point):
                raise ConstructionError(f"expected a Point, got {point!r}")
            pairs.append((point, bool(is_handle)))
        self.points = pairs
        self.closed = bool(closed)
        self.filled = bool(filled)
        self.stroked = bool(stroked)

    def segments(self) -> list:
        """
        Group the points into path elements.

        Returns:
            list: MoveTo followed by LineTo/CurveTo elements, ending with
                  ClosePath for closed shapes

        Raises:
            MalformedPathError: a handle group before an anchor point (or a
                trailing group) does not hold exactly two points
            ConstructionError: fewer than two points, or the first point is
                a handle
        """
        if len(self.points) < 2:
            raise ConstructionError("a shape needs at least two points")

        first, first_is_handle = self.points[0]
        if first_is_handle:
            raise MalformedPathError("the first point of a shape cannot be a bezier handle")

        elements = [MoveTo(first)]
        handles = []
        for index, (point, is_handle) in enumerate(self.points[1:], start=1):
            if is_handle:
                handles.append(point)
                continue
            if not handles:
                elements.append(LineTo(point))
            elif len(handles) == 2:
                elements.append(CurveTo(handles[0], handles[1], point))
                handles = []
            else:
                raise MalformedPathError(
                    f"point {index} is preceded by {len(handles)} bezier handle(s), expected 2")

        if handles:
            if not self.closed or len(handles) != 2:
                raise MalformedPathError(
                    f"shape ends with {len(handles)} dangling bezier handle(s)")
            elements.append(CurveTo(handles[0], handles[1], first))

        if self.closed:
            elements.append(ClosePath())
        return elements

    def segment_count(self) -> int:
        """Number of drawn edges, counting the implicit closing edge."""
        elements = self.segments()
        count = sum(1 for e in elements if isinstance(e, (LineTo, CurveTo)))
        if self.closed:
            last = elements[-2]
            if not (isinstance(last, CurveTo) and last.p3 is elements[0].p):
                count += 1
        return count


def polyline(points: Sequence[Point], closed: bool = False, filled: bool = False,
             stroked: bool = True) -> Shape:
    """Build a Shape from plain points without bezier handles."""
    return Shape([(p, False) for p in points], closed=closed, filled=filled,
                 stroked=stroked)
