#!/usr/bin/env python3
# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PrintForge - command line front end

Lays out a UTF-8 text file onto pages with a TrueType/OpenType font and
saves the result as a PDF.

Usage:
    printforge notes.txt --font DejaVuSans.ttf
    printforge notes.txt --font DejaVuSans.ttf --page-size Letter -o notes.pdf
    cat notes.txt | printforge - --font DejaVuSans.ttf -o notes.pdf
"""

import logging
import os
import sys

from .cli_args import build_argument_parser, get_output_file_name, parse_page_size
from .core.document import Document
from .core.error import FontError, PrintForgeError, SerializationError
from .core.font import Font
from .core.units import pt_to_mm
from .devices.pdf.pdf import SaveOptions

logger = logging.getLogger(__name__)

# Baseline-to-baseline distance as a multiple of the font size
LINE_SPACING = 1.2


def wrap_line(line: str, font: Font, size: float, max_width_pt: float) -> list[str]:
    """
    Break one paragraph into lines that fit max_width_pt.

    Words longer than a whole line are broken between characters.
    """
    if not line.strip():
        return ['']
    lines = []
    current = ''
    for word in line.split(' '):
        candidate = word if not current else current + ' ' + word
        if font.text_width(candidate, size) <= max_width_pt:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = ''
        while font.text_width(word, size) > max_width_pt and len(word) > 1:
            cut = len(word) - 1
            while cut > 1 and font.text_width(word[:cut], size) > max_width_pt:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    lines.append(current)
    return lines


def layout_text(document: Document, font_ref, font: Font, text: str, size: float,
                margin: float) -> int:
    """
    Write text onto the document's pages, adding pages as needed.

    Args:
        document: Target document; drawing starts on its first page
        font_ref: Registered font
        font: The font behind font_ref, used for measuring
        text: Text to lay out; newlines start paragraphs
        size: Font size in points
        margin: Page margin in millimeters

    Returns:
        int: Number of pages used
    """
    page, layer = document.first_page, document.first_layer
    width, height = page.width_mm, page.height_mm
    max_width_pt = (width - 2 * margin) * 72.0 / 25.4
    if max_width_pt <= 0 or height - 2 * margin <= 0:
        raise PrintForgeError(f"margin of {margin} mm leaves no room on the page")

    line_height = pt_to_mm(size * LINE_SPACING)
    y = margin + pt_to_mm(size)
    for paragraph in text.replace('\r\n', '\n').split('\n'):
        for line in wrap_line(paragraph.expandtabs(4), font, size, max_width_pt):
            if y > height - margin:
                page, layer = document.add_page(width, height)
                y = margin + pt_to_mm(size)
            if line:
                layer.write_text(line, size, 0, margin, y, font_ref)
            y += line_height
    return len(document.pages)


def _read_input(inputfile: str) -> str:
    if inputfile == '-':
        return sys.stdin.read()
    with open(inputfile, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv=None) -> int:
    """Main entry point. Returns a process exit status."""
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        width, height = parse_page_size(args.page_size)
    except ValueError as e:
        print(f"PrintForge Error: {e}")
        print("Expected A3, A4, A5, Letter, Legal or WxH in millimeters, e.g. 100x150")
        return 1
    if args.font_size <= 0:
        print("PrintForge Error: Font size must be positive.")
        return 1
    if args.margin < 0:
        print("PrintForge Error: Margin cannot be negative.")
        return 1

    try:
        text = _read_input(args.inputfile)
    except FileNotFoundError:
        print(f"PrintForge Error: Input file '{args.inputfile}' not found.")
        return 1
    except UnicodeDecodeError as e:
        print(f"PrintForge Error: '{args.inputfile}' is not valid UTF-8: {e}")
        return 1
    except OSError as e:
        print(f"PrintForge Error: Cannot read '{args.inputfile}': {e}")
        return 1

    try:
        font = Font.from_file(args.font)
    except OSError as e:
        print(f"PrintForge Error: Cannot read font '{args.font}': {e}")
        return 1
    except FontError as e:
        print(f"PrintForge Error: Cannot use font '{args.font}': {e}")
        return 1

    if args.title:
        title = args.title
    elif args.inputfile == '-':
        title = 'stdin'
    else:
        title = os.path.splitext(os.path.basename(args.inputfile))[0]
    outputfile = get_output_file_name(args.outputfile, args.inputfile)
    options = SaveOptions(subset_fonts=not args.no_subset)
    if args.no_compress:
        options.compress = False

    try:
        document = Document(title, width, height)
        document.with_author(args.author).with_creator('PrintForge CLI')
        font_ref = document.add_font(font)
        pages = layout_text(document, font_ref, font, text, args.font_size, args.margin)
        document.save(outputfile, options)
    except SerializationError as e:
        print(f"PrintForge Error: Could not write '{outputfile}': {e}")
        return 1
    except PrintForgeError as e:
        print(f"PrintForge Error: {e}")
        return 1

    if args.verbose:
        print(f"Wrote {pages} page(s) to {outputfile}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
