# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Image XObject resource.

Decoding is Pillow's job; this module only normalizes the decoded pixel
buffer into one of the PDF device color spaces (8 bits per component) and
splits an alpha channel off into a soft mask.
"""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from .error import ResourceError
from .resources import IMAGE, Resource

logger = logging.getLogger(__name__)

DEFAULT_DPI = 300.0

# PIL mode -> (PDF color space, number of components)
_PIL_TO_PDF = {
    'L': ('DeviceGray', 1),
    'RGB': ('DeviceRGB', 3),
    'CMYK': ('DeviceCMYK', 4),
}


class Image(Resource):
    """
    A decoded raster image.

    Attributes:
        width, height: Size in pixels
        color_space: 'DeviceGray', 'DeviceRGB' or 'DeviceCMYK'
        samples: Raw 8-bit samples, row-major, interleaved
        smask: 8-bit alpha samples, or None when the image is opaque
        dpi: Resolution used to derive a default placement size
    """

    KIND = IMAGE

    def __init__(self, width: int, height: int, color_space: str, samples: bytes,
                 smask: bytes | None = None, dpi: float = DEFAULT_DPI) -> None:
        components = {'DeviceGray': 1, 'DeviceRGB': 3, 'DeviceCMYK': 4}.get(color_space)
        if components is None:
            raise ResourceError(f"unsupported image color space {color_space!r}")
        if width <= 0 or height <= 0:
            raise ResourceError(f"image size {width}x{height} is empty")
        if len(samples) != width * height * components:
            raise ResourceError(
                f"expected {width * height * components} sample bytes, got {len(samples)}")
        if smask is not None and len(smask) != width * height:
            raise ResourceError(f"expected {width * height} alpha bytes, got {len(smask)}")
        self.width = width
        self.height = height
        self.color_space = color_space
        self.samples = bytes(samples)
        self.smask = bytes(smask) if smask is not None else None
        self.dpi = dpi

    @classmethod
    def from_bytes(cls, data: bytes) -> Image:
        """Decode PNG/JPEG/TIFF/... bytes with Pillow."""
        try:
            pil_image = PILImage.open(io.BytesIO(data))
            pil_image.load()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
            raise ResourceError(f"cannot decode image: {exc}") from exc
        return cls.from_pil(pil_image)

    @classmethod
    def from_pil(cls, pil_image: PILImage.Image) -> Image:
        """Wrap an already decoded Pillow image."""
        dpi = pil_image.info.get('dpi', (DEFAULT_DPI, DEFAULT_DPI))[0] or DEFAULT_DPI

        has_alpha = (pil_image.mode in ('RGBA', 'LA', 'PA')
                     or (pil_image.mode == 'P' and 'transparency' in pil_image.info))
        if has_alpha:
            base_mode = 'L' if pil_image.mode == 'LA' else 'RGB'
            rgba = np.asarray(pil_image.convert('LA' if base_mode == 'L' else 'RGBA'))
            alpha = rgba[:, :, -1]
            color = np.ascontiguousarray(rgba[:, :, :-1])
            smask = None if bool((alpha == 255).all()) else alpha.tobytes()
            samples = color.tobytes()
        else:
            if pil_image.mode not in _PIL_TO_PDF:
                base_mode = 'L' if pil_image.mode in ('1', 'I', 'I;16', 'F') else 'RGB'
                pil_image = pil_image.convert(base_mode)
            base_mode = pil_image.mode
            samples = pil_image.tobytes()
            smask = None

        color_space, _ = _PIL_TO_PDF[base_mode]
        width, height = pil_image.size
        logger.debug("wrapped %dx%d %s image (alpha: %s)", width, height, color_space,
                     smask is not None)
        return cls(width, height, color_space, samples, smask, float(dpi))

    def default_size_mm(self) -> tuple[float, float]:
        """Placement size in millimeters at the image's own resolution."""
        return (self.width / self.dpi * 25.4, self.height / self.dpi * 25.4)
