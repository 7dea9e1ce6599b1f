# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
ICC profile resource.

Profiles are embedded as-is, never generated. The header is checked for the
'acsp' signature and the data color space, and Pillow's ImageCms reads the
description used for the output intent.
"""

from __future__ import annotations

import io
import logging

from .error import ResourceError
from .resources import ICC_PROFILE, Resource

try:
    from PIL import ImageCms
    _IMAGECMS_AVAILABLE = True
except ImportError:
    _IMAGECMS_AVAILABLE = False

logger = logging.getLogger(__name__)

# ICC data color space signature -> (components, PDF alternate space)
_COLOR_SPACES = {
    b'GRAY': (1, 'DeviceGray'),
    b'RGB ': (3, 'DeviceRGB'),
    b'CMYK': (4, 'DeviceCMYK'),
}


class IccProfile(Resource):
    """An ICC color profile to embed in the document."""

    KIND = ICC_PROFILE

    def __init__(self, data: bytes) -> None:
        data = bytes(data)
        if len(data) < 128 or data[36:40] != b'acsp':
            raise ResourceError("not an ICC profile (missing 'acsp' signature)")
        space = data[16:20]
        if space not in _COLOR_SPACES:
            raise ResourceError(f"unsupported ICC data color space {space!r}")
        self.data = data
        self.components, self.alternate = _COLOR_SPACES[space]
        self.description = self._read_description()

    def _read_description(self) -> str:
        if not _IMAGECMS_AVAILABLE:
            return ''
        try:
            profile = ImageCms.ImageCmsProfile(io.BytesIO(self.data))
            return (ImageCms.getProfileDescription(profile) or '').strip()
        except (ImageCms.PyCMSError, OSError) as exc:
            logger.debug("could not read ICC profile description: %s", exc)
            return ''
