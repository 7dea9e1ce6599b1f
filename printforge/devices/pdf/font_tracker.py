# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Font Tracker Module

Tracks font usage across one document so each embedded font can be subset
to the glyphs the document actually draws. Every text run of a document
feeds the same tracker, so all runs that share a font share one subset and
one glyph -> Unicode mapping table. A font used by two documents is tracked
(and subset) by each of them separately.
"""

from __future__ import annotations


class FontUsage:
    """
    Track usage of a single font.

    Records which glyph ids are used from this font, and the Unicode text
    each glyph was first drawn for (the ToUnicode mapping).
    """

    __slots__ = ('font_ref', 'font', 'order', 'glyph_map')

    def __init__(self, font_ref, font, order):
        """
        Initialize font usage tracking.

        Args:
            font_ref: FontRef the text runs used
            font: The Font resource behind the reference
            order: Order in which this font was first used (0-based)
        """
        self.font_ref = font_ref
        self.font = font
        self.order = order
        self.glyph_map = {}  # gid -> unicode text

    @property
    def glyphs_used(self):
        return set(self.glyph_map)


class FontTracker:
    """Track font and glyph usage during drawing, per document."""

    def __init__(self):
        """Initialize empty font tracker."""
        self.fonts_used = {}  # FontRef -> FontUsage
        self._next_order = 0

    def record(self, font_ref, font, text, gids=None):
        """
        Record the glyphs of one text run.

        The first character drawn with a glyph wins the glyph's Unicode
        mapping; glyph 0 (.notdef) is never mapped.

        Args:
            font_ref: FontRef used by the text run
            font: Font resource resolved from font_ref
            text: The run's Unicode text
            gids: Glyph ids of text, computed from the font when omitted
        """
        usage = self.fonts_used.get(font_ref)
        if usage is None:
            usage = FontUsage(font_ref, font, self._next_order)
            self.fonts_used[font_ref] = usage
            self._next_order += 1

        if gids is None:
            gids = font.glyph_ids(text)
        for ch, gid in zip(text, gids):
            if gid != 0:
                usage.glyph_map.setdefault(gid, ch)

    def usage_for(self, font_ref):
        """FontUsage for a reference, or None if no text used it."""
        return self.fonts_used.get(font_ref)
