# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Form XObject built from decoded vector drawing commands.

Vector parsing (SVG and friends) happens outside PrintForge. The decoder
hands over a list of drawing commands, each a (method name, args, kwargs)
triple naming a ContentStream operation; they are replayed into the form's
own content stream, with the form's bounding box as the page.
"""

from __future__ import annotations

from .content_stream import ContentStream
from .error import ConstructionError
from .resources import XOBJECT, Resource
from .units import mm_to_pt

# Operations a vector command may use
_ALLOWED = frozenset({
    'set_fill_color', 'set_outline_color', 'set_outline_thickness',
    'set_line_dash', 'set_line_cap', 'set_line_join',
    'add_shape', 'add_line', 'save_graphics_state', 'restore_graphics_state',
})


class VectorObject(Resource):
    """A reusable vector drawing, placed with ContentStream.use_xobject."""

    KIND = XOBJECT

    def __init__(self, commands, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ConstructionError(f"vector object size {width}x{height} is empty")
        self.width = float(width)
        self.height = float(height)
        self.stream = ContentStream(page_height=mm_to_pt(height))
        for command in commands:
            name, args, kwargs = _unpack(command)
            if name not in _ALLOWED:
                raise ConstructionError(f"unsupported vector command {name!r}")
            getattr(self.stream, name)(*args, **kwargs)

    def bbox(self) -> tuple[float, float, float, float]:
        """Bounding box in points."""
        return (0.0, 0.0, mm_to_pt(self.width), mm_to_pt(self.height))

    def default_size_mm(self) -> tuple[float, float]:
        return (self.width, self.height)


def _unpack(command):
    if isinstance(command, str):
        return command, (), {}
    if len(command) == 2:
        return command[0], tuple(command[1]), {}
    if len(command) == 3:
        return command[0], tuple(command[1]), dict(command[2])
    raise ConstructionError(f"malformed vector command {command!r}")
