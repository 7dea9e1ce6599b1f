# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PrintForge - Public API

Build print-grade PDF documents: register fonts, images, ICC profiles and
vector objects on a Document, draw into page layers through the returned
references, then save.

**Usage:**
```python
from printforge import Document, Point, Rgb

doc = Document("T", 100, 100)
layer = doc.first_layer
layer.set_fill_color(Rgb(1, 0, 0))
layer.add_shape([(Point(0, 0), False), (Point(0, 50), False),
                 (Point(50, 50), False), (Point(50, 0), False)],
                closed=True, filled=True, stroked=True)
doc.save("quad.pdf")
```
"""

__version__ = "0.1.0"

from .core.color import BLACK, WHITE, Cmyk, Color, Greyscale, Rgb
from .core.content_stream import (
    CAP_BUTT, CAP_ROUND, CAP_SQUARE, JOIN_BEVEL, JOIN_MITER, JOIN_ROUND,
    TEXT_FILL, TEXT_FILL_STROKE, TEXT_INVISIBLE, TEXT_STROKE,
)
from .core.document import Document
from .core.error import (
    ConstructionError, CorruptFontError, FontError, MalformedPathError, PrintForgeError,
    ResourceError, SerializationError, UnsupportedFontError,
)
from .core.font import Font, decode_glyphs
from .core.metadata import PDFX_3_2002, PDFX_3_2003, PDFX_4, PDFX_NONE
from .core.geometry import Point, Shape
from .core.icc_profile import IccProfile
from .core.image import Image
from .core.layer import Layer
from .core.page import Page
from .core.resources import FontRef, IccProfileRef, ImageRef, Reference, XObjectRef
from .core.units import PAGE_SIZES, Mm, Pt, mm_to_pt, pt_to_mm
from .devices.pdf.pdf import SaveOptions
