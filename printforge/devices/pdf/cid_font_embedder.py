# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
CID Font Embedder Module

Prepares TrueType/OpenType fonts for embedding as PDF Type 0 composite fonts
(Identity-H encoding, CIDFontType2 or CIDFontType0 descendant).

Content streams address glyphs by glyph id and the descendant font uses
/CIDToGIDMap /Identity, so a CID is always the glyph id of the original font.
Subsetting therefore retains glyph ids: unused glyphs are emptied, never
renumbered.
"""

import hashlib
import io
import logging
import string

from fontTools import subset as ftsubset
from fontTools.ttLib import TTFont

logger = logging.getLogger(__name__)

# Tables the PDF consumer never reads
_DROP_TABLES = [
    "FFTM",  # FontForge timestamp
    "GDEF",
    "GPOS",
    "GSUB",
    "MATH",
    "hdmx",
    "meta",
    "sbix",
    "CBDT",
    "CBLC",
    "EBDT",
    "EBLC",
    "EBSC",
    "SVG ",
    "CPAL",
    "COLR",
]

# FontDescriptor /Flags bits
FLAG_FIXED_PITCH = 1
FLAG_SYMBOLIC = 1 << 2
FLAG_ITALIC = 1 << 6
FLAG_FORCE_BOLD = 1 << 18


class CIDFontEmbedder:
    """
    Generate the data behind the PDF structures of an embedded CID font.
    """

    def __init__(self, subset_fonts: bool = True) -> None:
        """
        Args:
            subset_fonts: Strip glyphs the document never draws
        """
        self.subset_fonts = subset_fonts

    def get_font_file_data(self, font, glyphs_used: set[int]) -> bytes:
        """
        Font program to embed: a glyph-id preserving subset, or the
        original bytes when subsetting is off.

        Args:
            font: Font resource
            glyphs_used: Glyph ids drawn by the document

        Returns:
            bytes: sfnt binary
        """
        if not self.subset_fonts:
            return font.data

        options = ftsubset.Options(notdef_outline=True, recommended_glyphs=True)
        options.retain_gids = True
        options.drop_tables += _DROP_TABLES
        options.name_IDs = ['*']
        options.name_languages = ['*']
        options.notdef_glyph = True

        tt = TTFont(io.BytesIO(font.data), lazy=False, recalcTimestamp=False)
        subsetter = ftsubset.Subsetter(options=options)
        subsetter.populate(gids=sorted(glyphs_used | {0}))
        subsetter.subset(tt)

        out = io.BytesIO()
        tt.save(out)
        data = out.getvalue()
        logger.debug("subset %s to %d glyphs: %d -> %d bytes",
                     font.name, len(glyphs_used), len(font.data), len(data))
        return data

    def get_base_font_name(self, font, glyphs_used: set[int]) -> str:
        """
        /BaseFont name; subsets carry a tag derived from the glyph set.
        """
        if not self.subset_fonts:
            return font.name
        return f'{subset_tag(font.name, glyphs_used)}+{font.name}'

    def get_glyph_widths(self, font, glyphs_used: set[int]) -> dict[int, int]:
        """
        Advance widths of the used glyphs, in 1000-unit glyph space.

        Returns:
            dict: {cid: width}; CIDs equal glyph ids
        """
        return {gid: font.program.glyph_width(gid) for gid in glyphs_used}

    def build_w_array(self, glyph_widths: dict[int, int]) -> list:
        """
        Build compact PDF /W array for CID font widths.

        Format: [start_cid [w1 w2 ...] start_cid2 [w3 w4 ...] ...]
        Groups consecutive CIDs into runs.

        Args:
            glyph_widths: dict {cid: width} from get_glyph_widths()

        Returns:
            list: Alternating start_cid and width lists for consecutive runs
        """
        if not glyph_widths:
            return []

        sorted_cids = sorted(glyph_widths.keys())
        result = []
        run_start = sorted_cids[0]
        run_widths = [glyph_widths[sorted_cids[0]]]

        for i in range(1, len(sorted_cids)):
            cid = sorted_cids[i]
            if cid == sorted_cids[i - 1] + 1:
                run_widths.append(glyph_widths[cid])
            else:
                result.append(run_start)
                result.append(run_widths)
                run_start = cid
                run_widths = [glyph_widths[cid]]

        result.append(run_start)
        result.append(run_widths)

        return result

    def get_default_width(self, font) -> int:
        """/DW: width of .notdef, which is what unlisted CIDs render as."""
        return font.program.glyph_width(0)

    def get_font_metrics(self, font) -> dict[str, object]:
        """
        Metrics for the FontDescriptor, scaled to 1000-unit space.

        Returns:
            dict with keys: ascent, descent, cap_height, stem_v, bbox,
            italic_angle, flags
        """
        program = font.program
        scale = program.scale
        metrics = self._default_metrics()

        metrics['bbox'] = [int(round(v * scale)) for v in program.bbox]
        metrics['ascent'] = int(round(program.ascent * scale))
        metrics['descent'] = int(round(program.descent * scale))
        if program.cap_height:
            metrics['cap_height'] = int(round(program.cap_height * scale))
        else:
            metrics['cap_height'] = metrics['ascent']
        # Rough StemV estimate from the weight class; no embedder reads it
        metrics['stem_v'] = 10 + int(220 * ((program.weight_class - 50) / 900.0) ** 2)
        metrics['italic_angle'] = program.italic_angle

        flags = FLAG_SYMBOLIC
        if program.is_fixed_pitch:
            flags |= FLAG_FIXED_PITCH
        if program.italic_angle or program.mac_style & 0x02:
            flags |= FLAG_ITALIC
        if program.weight_class >= 600 or program.mac_style & 0x01:
            flags |= FLAG_FORCE_BOLD
        metrics['flags'] = flags
        return metrics

    def _default_metrics(self) -> dict[str, object]:
        """Return default font metrics."""
        return {
            'ascent': 800,
            'descent': -200,
            'cap_height': 700,
            'stem_v': 80,
            'bbox': [0, -200, 1000, 800],
            'italic_angle': 0,
            'flags': FLAG_SYMBOLIC,
        }

    def get_cid_system_info(self) -> tuple[str, str, int]:
        """Registry, Ordering and Supplement of an Identity-ordered font."""
        return 'Adobe', 'Identity', 0


def subset_tag(font_name: str, glyphs_used: set[int]) -> str:
    """
    Six uppercase letters identifying a subset.

    Equal glyph sets of the same font always get the same tag, which keeps
    repeated saves byte-identical.
    """
    digest = hashlib.sha256(font_name.encode('utf-8'))
    digest.update(','.join(str(g) for g in sorted(glyphs_used)).encode('ascii'))
    letters = string.ascii_uppercase
    return ''.join(letters[b % 26] for b in digest.digest()[:6])


def generate_cid_tounicode_cmap(tounicode_map: dict[int, str],
                                font_name: str = 'Unknown') -> bytes:
    """
    Generate a ToUnicode CMap stream for CID font PDF embedding.

    Uses 2-byte codespace <0000>-<FFFF> for CID values. Code points above
    the BMP are written as UTF-16 surrogate pairs.

    Args:
        tounicode_map: dict mapping cid (int) -> unicode_string (str)
        font_name: Font name for the CMap

    Returns:
        bytes: ToUnicode CMap stream content
    """
    cmap_name = font_name.replace('+', '-')
    lines = [
        b'/CIDInit /ProcSet findresource begin',
        b'12 dict begin',
        b'begincmap',
        b'/CIDSystemInfo <<',
        b'  /Registry (Adobe)',
        b'  /Ordering (UCS)',
        b'  /Supplement 0',
        b'>> def',
        f'/CMapName /{cmap_name}-UCS def'.encode('latin-1', 'replace'),
        b'/CMapType 2 def',
        b'1 begincodespacerange',
        b'<0000> <FFFF>',
        b'endcodespacerange',
    ]

    mappings = []
    for cid, unicode_str in sorted(tounicode_map.items()):
        hex_code = f'{cid:04X}'
        unicode_hex = unicode_str.encode('utf-16-be').hex().upper()
        mappings.append((hex_code, unicode_hex))

    # Emit in batches of 100 (PDF limit per block)
    for i in range(0, len(mappings), 100):
        batch = mappings[i:i + 100]
        lines.append(f'{len(batch)} beginbfchar'.encode())
        for hex_code, unicode_hex in batch:
            lines.append(f'<{hex_code}> <{unicode_hex}>'.encode())
        lines.append(b'endbfchar')

    lines.extend([
        b'endcmap',
        b'CMapName currentdict /CMap defineresource pop',
        b'end',
        b'end',
    ])

    return b'\n'.join(lines)
