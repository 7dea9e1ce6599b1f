# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Device colors.

Components are validated to lie in [0, 1] when a color is created; values
outside that range raise ConstructionError instead of being clamped.
"""

from __future__ import annotations

import math

from .error import ConstructionError
from .units import format_number


def _check_components(kind: str, components: tuple) -> tuple[float, ...]:
    checked = []
    for value in components:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConstructionError(f"{kind} component must be a number, got {value!r}")
        value = float(value)
        if math.isnan(value) or value < 0.0 or value > 1.0:
            raise ConstructionError(f"{kind} component {value!r} outside [0, 1]")
        checked.append(value)
    return tuple(checked)


class Color:
    """Base for device colors. Subclasses define the PDF operators."""

    __slots__ = ('components',)

    COLOR_SPACE = ''
    FILL_OPERATOR = ''
    STROKE_OPERATOR = ''

    def __init__(self, *components: float) -> None:
        self.components = _check_components(type(self).__name__, components)

    def fill_operator(self) -> bytes:
        return self._operator(self.FILL_OPERATOR)

    def stroke_operator(self) -> bytes:
        return self._operator(self.STROKE_OPERATOR)

    def _operator(self, op: str) -> bytes:
        values = ' '.join(format_number(c) for c in self.components)
        return f'{values} {op}'.encode('ascii')

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.components == other.components

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.components))

    def __repr__(self) -> str:
        values = ', '.join(repr(c) for c in self.components)
        return f'{type(self).__name__}({values})'


class Rgb(Color):
    """DeviceRGB color."""

    __slots__ = ()

    COLOR_SPACE = 'DeviceRGB'
    FILL_OPERATOR = 'rg'
    STROKE_OPERATOR = 'RG'

    def __init__(self, r: float, g: float, b: float) -> None:
        super().__init__(r, g, b)


class Cmyk(Color):
    """DeviceCMYK color, the native space for print output."""

    __slots__ = ()

    COLOR_SPACE = 'DeviceCMYK'
    FILL_OPERATOR = 'k'
    STROKE_OPERATOR = 'K'

    def __init__(self, c: float, m: float, y: float, k: float) -> None:
        super().__init__(c, m, y, k)


class Greyscale(Color):
    """DeviceGray color."""

    __slots__ = ()

    COLOR_SPACE = 'DeviceGray'
    FILL_OPERATOR = 'g'
    STROKE_OPERATOR = 'G'

    def __init__(self, gray: float) -> None:
        super().__init__(gray)


BLACK = Greyscale(0.0)
WHITE = Greyscale(1.0)
