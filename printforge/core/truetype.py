# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TrueType / OpenType font program parser.

Reads just enough of an sfnt binary to embed it as a CID-keyed PDF font:
the table directory, head/hhea/hmtx/maxp metrics, the Unicode cmap
(formats 4 and 12), the PostScript name and OS/2 / post details for the
FontDescriptor.

A font program is rejected at parse time when its table directory cannot
be read (CorruptFontError) or when it has no outline tables at all, as with
bitmap-only fonts (UnsupportedFontError).
"""

from __future__ import annotations

import logging
import struct

from .error import CorruptFontError, UnsupportedFontError

logger = logging.getLogger(__name__)

_SFNT_TRUETYPE = (b'\x00\x01\x00\x00', b'true')
_SFNT_CFF = b'OTTO'
_SFNT_COLLECTION = b'ttcf'

_HEAD_MAGIC = 0x5F0F3CF5

_REQUIRED_TABLES = (b'head', b'hhea', b'hmtx', b'maxp', b'cmap')


def parse_table_directory(data: bytes) -> dict[bytes, tuple[int, int]]:
    """
    Parse the sfnt offset table and return the table directory.

    Args:
        data: Complete font binary

    Returns:
        dict: {tag_bytes: (offset, length)} for each table

    Raises:
        CorruptFontError: directory truncated or a table lies outside the data
        UnsupportedFontError: font collections and unknown sfnt flavors
    """
    if len(data) < 12:
        raise CorruptFontError(f"font data too short for an sfnt header ({len(data)} bytes)")

    magic = data[:4]
    if magic == _SFNT_COLLECTION:
        raise UnsupportedFontError("TrueType collections (.ttc) are not supported")
    if magic not in _SFNT_TRUETYPE and magic != _SFNT_CFF:
        raise CorruptFontError(f"unknown sfnt version {magic!r}")

    num_tables = struct.unpack_from('>H', data, 4)[0]
    if num_tables == 0 or 12 + num_tables * 16 > len(data):
        raise CorruptFontError(f"table directory with {num_tables} entries is truncated")

    tables = {}
    for i in range(num_tables):
        rec_offset = 12 + i * 16
        tag = data[rec_offset:rec_offset + 4]
        tbl_offset, tbl_length = struct.unpack_from('>II', data, rec_offset + 8)
        if tbl_offset + tbl_length > len(data):
            raise CorruptFontError(
                f"table {tag.decode('latin-1')!r} extends past the end of the font")
        tables[tag] = (tbl_offset, tbl_length)
    return tables


class TrueTypeFont:
    """
    Parsed metrics and character map of an sfnt font program.

    All metric attributes are in font units unless the name says otherwise;
    `scale` converts font units to the 1000-unit glyph space PDF uses.
    """

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.tables = parse_table_directory(self.data)

        missing = [t.decode('latin-1') for t in _REQUIRED_TABLES if t not in self.tables]
        if missing:
            raise CorruptFontError(f"font is missing required tables: {', '.join(missing)}")

        self.is_cff = b'CFF ' in self.tables or b'CFF2' in self.tables
        has_glyf = b'glyf' in self.tables and b'loca' in self.tables
        if not (has_glyf or self.is_cff):
            raise UnsupportedFontError(
                "font has no outline data (no glyf/loca or CFF table), "
                "bitmap-only fonts cannot be embedded")

        self._parse_head()
        self._parse_hhea()
        self._parse_maxp()
        self._parse_hmtx()
        self.cmap = self._parse_cmap()
        self.postscript_name = self._extract_ps_name() or 'Untitled'
        self._parse_os2()
        self._parse_post()

        logger.debug("parsed font %s: %d glyphs, %d mapped code points, upem %d",
                     self.postscript_name, self.num_glyphs, len(self.cmap),
                     self.units_per_em)

    @classmethod
    def parse(cls, data: bytes) -> TrueTypeFont:
        """Parse a font binary; raises FontError subclasses on bad data."""
        return cls(data)

    # -- table access ------------------------------------------------------

    def _table(self, tag: bytes, min_length: int = 0) -> bytes:
        offset, length = self.tables[tag]
        if length < min_length:
            raise CorruptFontError(
                f"{tag.decode('latin-1')!r} table too short ({length} < {min_length} bytes)")
        return self.data[offset:offset + length]

    def _parse_head(self) -> None:
        head = self._table(b'head', 54)
        magic = struct.unpack_from('>I', head, 12)[0]
        if magic != _HEAD_MAGIC:
            raise CorruptFontError("head table has a bad magic number")
        self.units_per_em = struct.unpack_from('>H', head, 18)[0]
        if not 16 <= self.units_per_em <= 16384:
            raise CorruptFontError(f"unitsPerEm {self.units_per_em} out of range")
        self.bbox = struct.unpack_from('>hhhh', head, 36)
        self.mac_style = struct.unpack_from('>H', head, 44)[0]

    def _parse_hhea(self) -> None:
        hhea = self._table(b'hhea', 36)
        self.ascent, self.descent = struct.unpack_from('>hh', hhea, 4)
        self.num_hmetrics = struct.unpack_from('>H', hhea, 34)[0]

    def _parse_maxp(self) -> None:
        maxp = self._table(b'maxp', 6)
        self.num_glyphs = struct.unpack_from('>H', maxp, 4)[0]
        if self.num_glyphs == 0:
            raise CorruptFontError("font declares zero glyphs")

    def _parse_hmtx(self) -> None:
        if self.num_hmetrics == 0 or self.num_hmetrics > self.num_glyphs:
            raise CorruptFontError(f"numberOfHMetrics {self.num_hmetrics} is invalid")
        hmtx = self._table(b'hmtx', self.num_hmetrics * 4)
        widths = [struct.unpack_from('>H', hmtx, i * 4)[0] for i in range(self.num_hmetrics)]
        # Glyphs past numberOfHMetrics repeat the last advance width
        widths.extend([widths[-1]] * (self.num_glyphs - self.num_hmetrics))
        self.advance_widths = widths

    def _parse_cmap(self) -> dict[int, int]:
        """
        Build the Unicode code point -> glyph id map.

        Prefers format 12 (full Unicode) over format 4 (BMP only), and
        Windows Unicode subtables over the Unicode platform.
        """
        tbl = self._table(b'cmap', 4)
        num_records = struct.unpack_from('>H', tbl, 2)[0]

        best_offset = None
        best_format = 0
        best_rank = -1

        for i in range(num_records):
            rec_off = 4 + i * 8
            if rec_off + 8 > len(tbl):
                raise CorruptFontError("cmap encoding records are truncated")
            plat_id, enc_id, sub_offset = struct.unpack_from('>HHI', tbl, rec_off)
            if sub_offset + 2 > len(tbl):
                raise CorruptFontError("cmap subtable offset out of range")
            fmt = struct.unpack_from('>H', tbl, sub_offset)[0]
            if fmt not in (4, 12):
                continue
            if plat_id == 3 and enc_id in (1, 10):
                rank = 2
            elif plat_id == 0:
                rank = 1
            else:
                continue
            if (fmt, rank) > (best_format, best_rank):
                best_format, best_rank, best_offset = fmt, rank, sub_offset

        if best_offset is None:
            logger.warning("font has no Unicode cmap subtable; no text can be encoded")
            return {}

        if best_format == 4:
            result = _parse_cmap_format4(tbl, best_offset)
        else:
            result = _parse_cmap_format12(tbl, best_offset)
        return {cp: gid for cp, gid in result.items() if gid < self.num_glyphs}

    def _extract_ps_name(self) -> str | None:
        """PostScript name (nameID 6), preferring the Windows Unicode record."""
        if b'name' not in self.tables:
            return None
        tbl = self._table(b'name')
        if len(tbl) < 6:
            return None

        _fmt, count, string_offset = struct.unpack_from('>HHH', tbl, 0)
        mac_name = None

        for i in range(count):
            rec_offset = 6 + i * 12
            if rec_offset + 12 > len(tbl):
                break
            platform_id, encoding_id, _lang_id, name_id, str_length, str_offset = (
                struct.unpack_from('>HHHHHH', tbl, rec_offset)
            )
            if name_id != 6:
                continue

            start = string_offset + str_offset
            end = start + str_length
            if end > len(tbl):
                continue
            raw = tbl[start:end]

            if platform_id in (0, 3):
                try:
                    return _sanitize_ps_name(raw.decode('utf-16-be'))
                except UnicodeDecodeError:
                    continue
            elif platform_id == 1 and mac_name is None:
                mac_name = _sanitize_ps_name(raw.decode('latin-1'))

        return mac_name

    def _parse_os2(self) -> None:
        self.cap_height = None
        self.weight_class = 400
        if b'OS/2' not in self.tables:
            return
        os2 = self._table(b'OS/2')
        if len(os2) >= 6:
            self.weight_class = struct.unpack_from('>H', os2, 4)[0]
        # sCapHeight is at offset 88 (version >= 2)
        if len(os2) >= 90:
            version = struct.unpack_from('>H', os2, 0)[0]
            cap_height = struct.unpack_from('>h', os2, 88)[0]
            if version >= 2 and cap_height > 0:
                self.cap_height = cap_height

    def _parse_post(self) -> None:
        self.italic_angle = 0.0
        self.is_fixed_pitch = False
        if b'post' not in self.tables:
            return
        post = self._table(b'post')
        if len(post) >= 16:
            self.italic_angle = struct.unpack_from('>i', post, 4)[0] / 65536.0
            self.is_fixed_pitch = struct.unpack_from('>I', post, 12)[0] != 0

    # -- lookups -----------------------------------------------------------

    @property
    def scale(self) -> float:
        """Factor from font units to 1000-unit glyph space."""
        return 1000.0 / self.units_per_em

    def glyph_id(self, code_point: int) -> int:
        """Glyph id for a code point, 0 (.notdef) when unmapped."""
        return self.cmap.get(code_point, 0)

    def glyph_width(self, gid: int) -> int:
        """Advance width of a glyph in 1000-unit glyph space."""
        if 0 <= gid < len(self.advance_widths):
            return int(round(self.advance_widths[gid] * self.scale))
        return int(round(self.advance_widths[0] * self.scale))


def _sanitize_ps_name(name: str) -> str:
    """Strip characters that are not allowed in a PDF name token."""
    return ''.join(c for c in name if 33 <= ord(c) <= 126 and c not in '()<>[]{}/%#')


def _parse_cmap_format4(tbl: bytes, offset: int) -> dict[int, int]:
    """Parse cmap format 4 (segment mapping to delta values)."""
    if offset + 14 > len(tbl):
        raise CorruptFontError("cmap format 4 subtable is truncated")

    seg_count = struct.unpack_from('>H', tbl, offset + 6)[0] // 2

    end_codes_off = offset + 14
    start_codes_off = end_codes_off + seg_count * 2 + 2  # +2 for reservedPad
    delta_off = start_codes_off + seg_count * 2
    range_off = delta_off + seg_count * 2
    if range_off + seg_count * 2 > len(tbl):
        raise CorruptFontError("cmap format 4 segment arrays are truncated")

    result = {}
    for i in range(seg_count):
        end_code = struct.unpack_from('>H', tbl, end_codes_off + i * 2)[0]
        start_code = struct.unpack_from('>H', tbl, start_codes_off + i * 2)[0]
        id_delta = struct.unpack_from('>h', tbl, delta_off + i * 2)[0]
        id_range_offset = struct.unpack_from('>H', tbl, range_off + i * 2)[0]

        if start_code == 0xFFFF:
            break

        for code in range(start_code, end_code + 1):
            if id_range_offset == 0:
                gid = (code + id_delta) & 0xFFFF
            else:
                glyph_off = range_off + i * 2 + id_range_offset + (code - start_code) * 2
                if glyph_off + 2 > len(tbl):
                    continue
                gid = struct.unpack_from('>H', tbl, glyph_off)[0]
                if gid != 0:
                    gid = (gid + id_delta) & 0xFFFF
            if gid != 0:
                result[code] = gid

    return result


def _parse_cmap_format12(tbl: bytes, offset: int) -> dict[int, int]:
    """Parse cmap format 12 (segmented coverage)."""
    if offset + 16 > len(tbl):
        raise CorruptFontError("cmap format 12 subtable is truncated")

    n_groups = struct.unpack_from('>I', tbl, offset + 12)[0]
    result = {}
    group_off = offset + 16
    for _ in range(n_groups):
        if group_off + 12 > len(tbl):
            raise CorruptFontError("cmap format 12 groups are truncated")
        start_char, end_char, start_gid = struct.unpack_from('>III', tbl, group_off)
        group_off += 12
        if end_char > 0x10FFFF or start_char > end_char:
            continue
        for code in range(start_char, end_char + 1):
            gid = start_gid + (code - start_char)
            if gid != 0:
                result[code] = gid

    return result
