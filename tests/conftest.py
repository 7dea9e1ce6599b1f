# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared fixtures: in-process test fonts, ICC profiles and documents."""

import datetime
import io
import struct

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.t2CharStringPen import T2CharStringPen
from fontTools.pens.ttGlyphPen import TTGlyphPen

from printforge.core.document import Document

# Characters mapped by the test fonts; U+1F600 exercises cmap format 12
CHARS = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789 .,;:!?-'\"()"
    "éü€\U0001F600"
)

FIXED_DATE = datetime.datetime(2024, 5, 17, 12, 30, 0, tzinfo=datetime.timezone.utc)


def _glyph_name(ch):
    cp = ord(ch)
    if ch == ' ':
        return 'space'
    return f'uni{cp:04X}' if cp <= 0xFFFF else f'u{cp:05X}'


def _draw_box(pen, width):
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((width - 50, 700))
    pen.lineTo((width - 50, 0))
    pen.closePath()


def _advance(index):
    return 500 + (index % 5) * 40


def _name_strings(family):
    return dict(
        familyName=dict(en=family),
        styleName=dict(en="Regular"),
        uniqueFontIdentifier=f"printforge-tests: {family}",
        fullName=f"{family} Regular",
        psName=f"{family}-Regular",
        version="Version 1.000",
    )


def build_truetype_font(family="PFTest"):
    """TrueType-flavored test font with box glyphs and varied widths."""
    glyph_order = ['.notdef'] + [_glyph_name(ch) for ch in CHARS]
    advances = {name: _advance(i) for i, name in enumerate(glyph_order)}

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({ord(ch): _glyph_name(ch) for ch in CHARS})

    glyphs = {}
    for name in glyph_order:
        pen = TTGlyphPen(None)
        _draw_box(pen, advances[name])
        glyphs[name] = pen.glyph()
    fb.setupGlyf(glyphs)

    glyph_table = fb.font['glyf']
    fb.setupHorizontalMetrics({name: (advances[name], glyph_table[name].xMin)
                               for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable(_name_strings(family))
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800,
                usWinDescent=200, sCapHeight=700, usWeightClass=400)
    fb.setupPost()

    out = io.BytesIO()
    fb.save(out)
    return out.getvalue()


def build_cff_font(family="PFTestCFF"):
    """OpenType (CFF outlines) test font."""
    chars = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz "
    glyph_order = ['.notdef'] + [_glyph_name(ch) for ch in chars]
    advances = {name: _advance(i) for i, name in enumerate(glyph_order)}

    fb = FontBuilder(1000, isTTF=False)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({ord(ch): _glyph_name(ch) for ch in chars})

    char_strings = {}
    for name in glyph_order:
        pen = T2CharStringPen(advances[name], None)
        _draw_box(pen, advances[name])
        char_strings[name] = pen.getCharString()
    ps_name = f"{family}-Regular"
    fb.setupCFF(ps_name, {"FullName": ps_name}, char_strings, {})

    fb.setupHorizontalMetrics({name: (advances[name], 50) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable(_name_strings(family))
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800,
                usWinDescent=200, sCapHeight=700)
    fb.setupPost()

    out = io.BytesIO()
    fb.save(out)
    return out.getvalue()


def rename_tables(data, renames):
    """Copy of an sfnt with table directory tags renamed."""
    data = bytearray(data)
    num_tables = struct.unpack_from('>H', data, 4)[0]
    for i in range(num_tables):
        rec = 12 + i * 16
        tag = bytes(data[rec:rec + 4])
        if tag in renames:
            data[rec:rec + 4] = renames[tag]
    return bytes(data)


@pytest.fixture(scope='session')
def font_bytes():
    return build_truetype_font()


@pytest.fixture(scope='session')
def cff_font_bytes():
    return build_cff_font()


@pytest.fixture(scope='session')
def bitmap_only_font_bytes(font_bytes):
    """Outline tables renamed to bitmap tables: parses, but has nothing to embed."""
    return rename_tables(font_bytes, {b'glyf': b'EBDT', b'loca': b'EBLC'})


@pytest.fixture
def font_path(tmp_path, font_bytes):
    path = tmp_path / 'PFTest-Regular.ttf'
    path.write_bytes(font_bytes)
    return path


@pytest.fixture(scope='session')
def srgb_profile_bytes():
    from PIL import ImageCms
    return ImageCms.ImageCmsProfile(ImageCms.createProfile('sRGB')).tobytes()


@pytest.fixture
def document():
    return Document('Test Document', 100, 100, 'Layer 1', creation_date=FIXED_DATE)
