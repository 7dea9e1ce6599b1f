# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Content Stream Builder

Accumulates the PDF operators of one layer (or one form XObject) as a list
of byte lines. Nothing is written anywhere until the document is saved.

Graphics state setters (colors, line width, dash, cap, join, text state) do
not emit operators directly. They update an overlay that is flushed right
before the next painting, text or XObject operator, and only for entries
whose value differs from what was last emitted in the current save level.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Sequence

from .color import Color
from .error import ConstructionError, ResourceError
from .geometry import ClosePath, CurveTo, LineTo, MoveTo, Point, Shape, polyline
from .resources import FONT, IMAGE, XOBJECT, Reference, ResourceResolver
from .units import format_number as _n, mm_to_pt

logger = logging.getLogger(__name__)

# Line cap and join styles
CAP_BUTT, CAP_ROUND, CAP_SQUARE = 0, 1, 2
JOIN_MITER, JOIN_ROUND, JOIN_BEVEL = 0, 1, 2

# Text rendering modes
TEXT_FILL, TEXT_STROKE, TEXT_FILL_STROKE, TEXT_INVISIBLE = 0, 1, 2, 3


def _positive(name: str, value: float, allow_zero: bool = True) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConstructionError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value) or value < 0 or (value == 0 and not allow_zero):
        raise ConstructionError(f"{name} must be a {'non-negative' if allow_zero else 'positive'} "
                                f"finite number, got {value!r}")
    return value


class ContentStream:
    """
    Ordered operator sequence with a lazily flushed graphics state overlay.

    Args:
        page_height: Height of the page (or form) in points, used to flip
                     top-left text positions into PDF's bottom-left space
        resolver: Read-only resource resolver; None for streams that cannot
                  reference resources (vector objects)
        glyph_recorder: Called as glyph_recorder(font_ref, font, text, gids)
                        for every text run, so the document can subset fonts
    """

    def __init__(self, page_height: float, resolver: ResourceResolver | None = None,
                 glyph_recorder: Callable | None = None) -> None:
        self.page_height = page_height
        self.operations: list[bytes] = []
        self.resources_used: dict[Reference, None] = {}
        self._resolver = resolver
        self._glyph_recorder = glyph_recorder
        self._pending: dict[str, bytes] = {}
        self._flushed: dict[str, bytes] = {}
        self._saved_states: list[tuple[dict[str, bytes], dict[str, bytes]]] = []

    # -- graphics state overlay -------------------------------------------

    def set_fill_color(self, color: Color) -> None:
        self._set('fill_color', self._check_color(color).fill_operator())

    def set_outline_color(self, color: Color) -> None:
        self._set('stroke_color', self._check_color(color).stroke_operator())

    def set_outline_thickness(self, thickness: float) -> None:
        """Line width in points."""
        self._set('line_width', f'{_n(_positive("outline thickness", thickness))} w'.encode())

    def set_line_dash(self, pattern: Sequence[float] = (), phase: float = 0) -> None:
        """Dash pattern in points; an empty pattern draws solid lines."""
        values = [_positive('dash length', v) for v in pattern]
        if values and not any(values):
            raise ConstructionError("a dash pattern cannot consist of zeros only")
        dashes = ' '.join(_n(v) for v in values)
        self._set('dash', f'[{dashes}] {_n(_positive("dash phase", phase))} d'.encode())

    def set_line_cap(self, cap: int) -> None:
        if cap not in (CAP_BUTT, CAP_ROUND, CAP_SQUARE):
            raise ConstructionError(f"invalid line cap style {cap!r}")
        self._set('cap', f'{cap} J'.encode())

    def set_line_join(self, join: int) -> None:
        if join not in (JOIN_MITER, JOIN_ROUND, JOIN_BEVEL):
            raise ConstructionError(f"invalid line join style {join!r}")
        self._set('join', f'{join} j'.encode())

    def set_character_spacing(self, spacing: float) -> None:
        """Extra space between glyphs, in unscaled text space units (points)."""
        if isinstance(spacing, bool) or not isinstance(spacing, (int, float)) \
                or not math.isfinite(spacing):
            raise ConstructionError(f"character spacing must be a finite number, got {spacing!r}")
        self._set('char_spacing', f'{_n(spacing)} Tc'.encode())

    def set_text_rendering_mode(self, mode: int) -> None:
        if mode not in range(8):
            raise ConstructionError(f"invalid text rendering mode {mode!r}")
        self._set('render_mode', f'{mode} Tr'.encode())

    @staticmethod
    def _check_color(color: Color) -> Color:
        if not isinstance(color, Color):
            raise ConstructionError(f"expected a color, got {color!r}")
        return color

    def _set(self, key: str, operator: bytes) -> None:
        self._pending[key] = operator

    def _flush(self) -> None:
        for key, operator in self._pending.items():
            if self._flushed.get(key) != operator:
                self.operations.append(operator)
                self._flushed[key] = operator

    # -- save / restore ----------------------------------------------------

    def save_graphics_state(self) -> None:
        self.operations.append(b'q')
        self._saved_states.append((dict(self._pending), dict(self._flushed)))

    def restore_graphics_state(self) -> None:
        if not self._saved_states:
            raise ConstructionError("restore_graphics_state without a matching save")
        self.operations.append(b'Q')
        # Q undoes setters called since the matching q, flushed or not
        self._pending, self._flushed = self._saved_states.pop()

    @property
    def open_states(self) -> int:
        """Number of saves not yet matched by a restore."""
        return len(self._saved_states)

    # -- paths ---------------------------------------------------------------

    def add_shape(self, points, closed: bool = False, filled: bool = False,
                  stroked: bool = True) -> int:
        """
        Emit a path from (Point, is_bezier_handle) pairs.

        Args:
            points: Sequence of (Point, bool) pairs, or a Shape
            closed: Close the outline back to the first point
            filled: Fill with the current fill color
            stroked: Stroke with the current outline color and thickness

        Returns:
            int: Number of segments drawn, including the closing edge

        Raises:
            MalformedPathError: bezier handles not grouped in pairs
        """
        shape = points if isinstance(points, Shape) else Shape(
            points, closed=closed, filled=filled, stroked=stroked)
        elements = shape.segments()
        count = shape.segment_count()

        self._flush()
        lines = self.operations
        for element in elements:
            if isinstance(element, MoveTo):
                x, y = element.p.to_pt()
                lines.append(f'{_n(x)} {_n(y)} m'.encode())
            elif isinstance(element, LineTo):
                x, y = element.p.to_pt()
                lines.append(f'{_n(x)} {_n(y)} l'.encode())
            elif isinstance(element, CurveTo):
                x1, y1 = element.p1.to_pt()
                x2, y2 = element.p2.to_pt()
                x3, y3 = element.p3.to_pt()
                lines.append(f'{_n(x1)} {_n(y1)} {_n(x2)} {_n(y2)} {_n(x3)} {_n(y3)} c'.encode())

        closes = isinstance(elements[-1], ClosePath)
        if shape.filled and shape.stroked:
            paint = b'b' if closes else b'B'
        elif shape.stroked:
            paint = b's' if closes else b'S'
        elif shape.filled:
            paint = b'f'
        else:
            paint = b'n'
        if closes and paint in (b'f', b'n'):
            lines.append(b'h')
        lines.append(paint)
        return count

    def add_line(self, points: Sequence[Point], closed: bool = False) -> int:
        """Stroke a polyline through plain points."""
        return self.add_shape(polyline(points, closed=closed))

    # -- text ------------------------------------------------------------------

    def write_text(self, text: str, size: float, rotation: float, x: float, y: float,
                   font_ref: Reference) -> None:
        """
        Emit a single text run.

        Args:
            text: Unicode text
            size: Font size in points
            rotation: Counter-clockwise rotation in degrees
            x, y: Baseline start in millimeters, measured from the top-left
                  corner of the page
            font_ref: Reference to a registered Font
        """
        if self._resolver is None:
            raise ResourceError("this content stream cannot reference resources")
        font = self._resolver.resolve(font_ref, FONT)
        if not isinstance(text, str):
            raise ConstructionError(f"text must be a string, got {text!r}")
        size = _positive('font size', size, allow_zero=False)
        if isinstance(rotation, bool) or not isinstance(rotation, (int, float)) \
                or not math.isfinite(rotation):
            raise ConstructionError(f"rotation must be a finite number, got {rotation!r}")
        position = Point(x, y)

        x_pdf = mm_to_pt(position.x)
        y_pdf = self.page_height - mm_to_pt(position.y)
        angle = math.radians(rotation)
        cos_a, sin_a = math.cos(angle), math.sin(angle)

        gids = font.glyph_ids(text)
        encoded = b''.join(gid.to_bytes(2, 'big') for gid in gids)
        if self._glyph_recorder is not None:
            self._glyph_recorder(font_ref, font, text, gids)
        self.resources_used[font_ref] = None

        self._flush()
        lines = self.operations
        lines.append(b'BT')
        lines.append(f'/{font_ref.name} {_n(size)} Tf'.encode())
        lines.append(f'{_n(cos_a)} {_n(sin_a)} {_n(-sin_a)} {_n(cos_a)} '
                     f'{_n(x_pdf)} {_n(y_pdf)} Tm'.encode())
        lines.append(f'<{encoded.hex().upper()}> Tj'.encode())
        lines.append(b'ET')

    # -- external objects ------------------------------------------------------

    def use_xobject(self, ref: Reference, x: float, y: float, width: float | None = None,
                    height: float | None = None, rotation: float = 0) -> None:
        """
        Place an image or vector object.

        Args:
            ref: ImageRef or XObjectRef
            x, y: Bottom-left corner in millimeters
            width, height: Placement size in millimeters; defaults to the
                           object's own size (images use their DPI)
            rotation: Counter-clockwise rotation in degrees about (x, y)
        """
        if self._resolver is None:
            raise ResourceError("this content stream cannot reference resources")
        if not isinstance(ref, Reference) or ref.KIND not in (IMAGE, XOBJECT):
            raise ResourceError(f"type mismatch: {ref!r} is not an image or vector object")
        resource = self._resolver.resolve(ref, ref.KIND)

        default_w, default_h = resource.default_size_mm()
        width = default_w if width is None else _positive('width', width, allow_zero=False)
        height = default_h if height is None else _positive('height', height, allow_zero=False)
        origin = Point(x, y)
        x_pdf, y_pdf = origin.to_pt()
        sx, sy = mm_to_pt(width), mm_to_pt(height)
        if ref.KIND == XOBJECT:
            # Forms are drawn in their own point-based bbox
            _, _, bbox_w, bbox_h = resource.bbox()
            sx, sy = sx / bbox_w, sy / bbox_h

        angle = math.radians(rotation)
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        self.resources_used[ref] = None

        self._flush()
        self.save_graphics_state()
        self.operations.append(
            f'{_n(sx * cos_a)} {_n(sx * sin_a)} {_n(-sy * sin_a)} {_n(sy * cos_a)} '
            f'{_n(x_pdf)} {_n(y_pdf)} cm'.encode())
        self.operations.append(f'/{ref.name} Do'.encode())
        self.restore_graphics_state()

    # -- output ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Operators joined by newlines, with any open saves closed."""
        lines = list(self.operations)
        if self._saved_states:
            logger.warning("closing %d unmatched graphics state save(s)",
                           len(self._saved_states))
            lines.extend([b'Q'] * len(self._saved_states))
        return b'\n'.join(lines)
