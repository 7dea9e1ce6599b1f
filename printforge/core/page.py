# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Page: ordered layers plus page geometry.

Width and height are given in millimeters and stored in points.
"""

from __future__ import annotations

import math

from .content_stream import ContentStream
from .error import ConstructionError
from .layer import Layer
from .units import mm_to_pt, pt_to_mm


class Page:
    """A page of a document. Created through Document.add_page."""

    def __init__(self, document, index: int, width_mm: float, height_mm: float) -> None:
        for label, value in (('width', width_mm), ('height', height_mm)):
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or value <= 0:
                raise ConstructionError(f"page {label} must be a positive number, got {value!r}")
        self._document = document
        self.index = index
        self.width_pt = mm_to_pt(width_mm)
        self.height_pt = mm_to_pt(height_mm)
        self.layers: list[Layer] = []

    @property
    def document(self):
        return self._document

    @property
    def width_mm(self) -> float:
        return pt_to_mm(self.width_pt)

    @property
    def height_mm(self) -> float:
        return pt_to_mm(self.height_pt)

    def add_layer(self, name: str, visible: bool = True, printable: bool = True) -> Layer:
        """Append a new layer on top of the existing ones and return it."""
        stream = ContentStream(self.height_pt, self._document.resources.resolver(),
                               self._document.font_tracker.record)
        layer = Layer(self, len(self.layers), name, stream, visible=visible,
                      printable=printable)
        self.layers.append(layer)
        return layer

    def __repr__(self) -> str:
        return f'Page({self.index + 1}, {self.width_mm:.1f}x{self.height_mm:.1f}mm)'
