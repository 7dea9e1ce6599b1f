# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Font resource.

Wraps a parsed TrueType/OpenType program. Text is encoded as big-endian
2-byte glyph ids, which is what the Identity-H encoding of the embedded
Type 0 font expects; glyph ids double as CIDs.
"""

from __future__ import annotations

import io
import logging

from .resources import FONT, Resource
from .truetype import TrueTypeFont

logger = logging.getLogger(__name__)


class Font(Resource):
    """A font program registered in a document."""

    KIND = FONT

    def __init__(self, data: bytes) -> None:
        self.program = TrueTypeFont.parse(data)

    @classmethod
    def from_file(cls, font_stream) -> Font:
        """Read a font from a path or a binary file object."""
        if hasattr(font_stream, 'read'):
            return cls(font_stream.read())
        with open(font_stream, 'rb') as f:
            return cls(f.read())

    @property
    def name(self) -> str:
        return self.program.postscript_name

    @property
    def data(self) -> bytes:
        return self.program.data

    def glyph_ids(self, text: str) -> list[int]:
        """
        Map each character of text to a glyph id.

        Characters the font cannot display map to glyph 0 (.notdef) and are
        reported once per call.
        """
        gids = []
        missing = []
        for ch in text:
            gid = self.program.glyph_id(ord(ch))
            if gid == 0 and ch not in missing:
                missing.append(ch)
            gids.append(gid)
        if missing:
            logger.warning("font %s has no glyph for %s", self.name,
                           ', '.join(repr(c) for c in missing[:10]))
        return gids

    def encode(self, text: str) -> bytes:
        """Identity-H encoding of text: 2 bytes per glyph id."""
        out = io.BytesIO()
        for gid in self.glyph_ids(text):
            out.write(gid.to_bytes(2, 'big'))
        return out.getvalue()

    def text_width(self, text: str, size: float) -> float:
        """Advance width of text at the given size, in points."""
        return sum(self.program.glyph_width(g) for g in self.glyph_ids(text)) * size / 1000.0


def decode_glyphs(encoded: bytes, glyph_map: dict[int, str]) -> str:
    """
    Recover text from an Identity-H glyph string.

    Args:
        encoded: Big-endian 2-byte glyph ids
        glyph_map: glyph id -> Unicode text, as recorded for the document

    Returns:
        str: Decoded text; glyphs without a mapping are dropped
    """
    chars = []
    for i in range(0, len(encoded) - 1, 2):
        gid = int.from_bytes(encoded[i:i + 2], 'big')
        chars.append(glyph_map.get(gid, ''))
    return ''.join(chars)
