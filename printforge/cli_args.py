# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
CLI argument parsing for PrintForge.

Handles command-line argument definition, parsing, page size specifications,
and output file naming.
"""

from __future__ import annotations

import argparse
import os

from .core.units import PAGE_SIZES


def parse_page_size(spec: str) -> tuple[float, float]:
    """Parse a page size specification into (width, height) in millimeters.

    Accepts a named size (``A4``, ``A5``, ``Letter``, ``Legal``, ...; case
    insensitive) or explicit dimensions ``WxH`` in millimeters, e.g.
    ``100x150`` or ``210.5x297``.

    Args:
        spec: Page size string

    Returns:
        Tuple of (width, height) in millimeters.

    Raises:
        ValueError: If the specification is malformed.
    """
    name = spec.strip().upper()
    if name in PAGE_SIZES:
        return PAGE_SIZES[name]
    parts = name.split("X")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise ValueError(f"Invalid page size: '{spec}'")
    try:
        width = float(parts[0])
        height = float(parts[1])
    except ValueError:
        raise ValueError(f"Invalid page size: '{spec}'")
    if not (width > 0 and height > 0) or width == float("inf") or height == float("inf"):
        raise ValueError(f"Page dimensions must be positive: '{spec}'")
    return width, height


def get_output_file_name(outputfile: str | None, inputfile: str) -> str:
    """
    Derive the output PDF path from command-line arguments.

    Args:
        outputfile: The -o argument value (or None)
        inputfile: The input text file ("-" for stdin)

    Returns:
        Output file path
    """
    if outputfile:
        return outputfile
    if inputfile == "-":
        return "stdin.pdf"
    base = os.path.splitext(os.path.basename(inputfile))[0]
    return base + ".pdf"


def _get_version() -> str:
    from . import __version__
    return __version__


def build_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the PrintForge argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="printforge",
        description="PrintForge - lay out a UTF-8 text file as a print-ready PDF",
        epilog="Use '-' as the input file to read text from stdin.",
    )

    parser.add_argument(
        "-V", "--version", action="version",
        version=f"PrintForge {_get_version()}"
    )
    parser.add_argument("inputfile", help="UTF-8 text file to lay out")
    parser.add_argument(
        "-o", "--output", dest="outputfile",
        help="Specify output filename (default: input name with .pdf)"
    )
    parser.add_argument(
        "--font", required=True,
        help="Path to the TrueType/OpenType font used for the text"
    )
    parser.add_argument(
        "--font-size", type=float, default=11.0,
        help="Font size in points (default: 11)"
    )
    parser.add_argument(
        "--page-size", default="A4",
        help="Page size: A3, A4, A5, Letter, Legal or WxH in mm (default: A4)"
    )
    parser.add_argument(
        "--margin", type=float, default=20.0,
        help="Page margin in mm (default: 20)"
    )
    parser.add_argument("--title", help="Document title (default: input file name)")
    parser.add_argument("--author", default="", help="Document author")
    parser.add_argument(
        "--no-compress", action="store_true",
        help="Write uncompressed streams (readable in a text editor)"
    )
    parser.add_argument(
        "--no-subset", action="store_true",
        help="Embed the whole font instead of the glyphs used"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    return parser
