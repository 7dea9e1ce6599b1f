# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Layer (Optional Content Group)

A layer is the drawing capability of PrintForge: it consumes resource
references and appends operators to its own content stream, and it has no
way to register or mutate resources. Visibility and printability are fixed
when the layer is created.
"""

from __future__ import annotations

from typing import Sequence

from .color import Color
from .content_stream import ContentStream
from .geometry import Point
from .resources import Reference


class Layer:
    """A named, independently toggleable group of page content."""

    def __init__(self, page, index: int, name: str, stream: ContentStream,
                 visible: bool = True, printable: bool = True) -> None:
        self._page = page
        self.index = index
        self.name = str(name)
        self.visible = bool(visible)
        self.printable = bool(printable)
        self.stream = stream

    @property
    def page(self):
        return self._page

    @property
    def oc_name(self) -> str:
        """Name of the layer's /Properties entry in the page resources."""
        return f'OC{self._page.index + 1}_{self.index + 1}'

    # Drawing operations, all forwarded to the layer's own stream

    def set_fill_color(self, color: Color) -> None:
        self.stream.set_fill_color(color)

    def set_outline_color(self, color: Color) -> None:
        self.stream.set_outline_color(color)

    def set_outline_thickness(self, thickness: float) -> None:
        self.stream.set_outline_thickness(thickness)

    def set_line_dash(self, pattern: Sequence[float] = (), phase: float = 0) -> None:
        self.stream.set_line_dash(pattern, phase)

    def set_line_cap(self, cap: int) -> None:
        self.stream.set_line_cap(cap)

    def set_line_join(self, join: int) -> None:
        self.stream.set_line_join(join)

    def set_character_spacing(self, spacing: float) -> None:
        self.stream.set_character_spacing(spacing)

    def set_text_rendering_mode(self, mode: int) -> None:
        self.stream.set_text_rendering_mode(mode)

    def save_graphics_state(self) -> None:
        self.stream.save_graphics_state()

    def restore_graphics_state(self) -> None:
        self.stream.restore_graphics_state()

    def add_shape(self, points, closed: bool = False, filled: bool = False,
                  stroked: bool = True) -> int:
        return self.stream.add_shape(points, closed=closed, filled=filled, stroked=stroked)

    def add_line(self, points: Sequence[Point], closed: bool = False) -> int:
        return self.stream.add_line(points, closed=closed)

    def write_text(self, text: str, size: float, rotation: float, x: float, y: float,
                   font: Reference) -> None:
        self.stream.write_text(text, size, rotation, x, y, font)

    def use_xobject(self, ref: Reference, x: float, y: float, width: float | None = None,
                    height: float | None = None, rotation: float = 0) -> None:
        self.stream.use_xobject(ref, x, y, width=width, height=height, rotation=rotation)

    def __repr__(self) -> str:
        return f'Layer({self.name!r}, page={self._page.index + 1})'
