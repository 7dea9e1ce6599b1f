# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Length units.

Callers work in millimeters; PDF user space is in points (1/72 inch).
"""

from __future__ import annotations

MM_PER_INCH = 25.4
PT_PER_INCH = 72.0
MM_TO_PT = PT_PER_INCH / MM_PER_INCH  # 2.834645...


class Mm(float):
    """A length in millimeters."""

    def to_pt(self) -> Pt:
        return Pt(self * MM_TO_PT)

    def __repr__(self) -> str:
        return f"Mm({float(self)!r})"


class Pt(float):
    """A length in PDF points."""

    def to_mm(self) -> Mm:
        return Mm(self / MM_TO_PT)

    def __repr__(self) -> str:
        return f"Pt({float(self)!r})"


def mm_to_pt(value: float) -> float:
    return float(value) * MM_TO_PT


def pt_to_mm(value: float) -> float:
    return float(value) / MM_TO_PT


# Named page sizes in millimeters (width, height), portrait
PAGE_SIZES = {
    'A3': (297.0, 420.0),
    'A4': (210.0, 297.0),
    'A5': (148.0, 210.0),
    'LETTER': (215.9, 279.4),
    'LEGAL': (215.9, 355.6),
}


def format_number(value: float) -> str:
    """Format a number for a content stream: 4 decimals, no trailing zeros."""
    text = f'{value:.4f}'.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        return '0'
    return text
