# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import pytest
from pypdf import PdfReader

from printforge.cli import layout_text, main, wrap_line
from printforge.cli_args import build_argument_parser, get_output_file_name, parse_page_size
from printforge.core.document import Document
from printforge.core.font import Font


class TestArguments:

    @pytest.mark.parametrize('spec, size', [
        ('A4', (210.0, 297.0)),
        ('letter', (215.9, 279.4)),
        (' a5 ', (148.0, 210.0)),
        ('100x150', (100.0, 150.0)),
        ('210.5X297', (210.5, 297.0)),
    ])
    def test_page_sizes(self, spec, size):
        assert parse_page_size(spec) == size

    @pytest.mark.parametrize('spec', ['B7', '100', '100x', 'x100', '0x100', '-5x10',
                                      'axb', 'infx10', 'nanx10'])
    def test_invalid_page_sizes(self, spec):
        with pytest.raises(ValueError):
            parse_page_size(spec)

    def test_output_file_name(self):
        assert get_output_file_name('out.pdf', 'notes.txt') == 'out.pdf'
        assert get_output_file_name(None, 'docs/notes.txt') == 'notes.pdf'
        assert get_output_file_name(None, '-') == 'stdin.pdf'

    def test_defaults(self):
        args = build_argument_parser().parse_args(['notes.txt', '--font', 'x.ttf'])
        assert args.page_size == 'A4'
        assert args.font_size == 11.0
        assert args.margin == 20.0
        assert args.outputfile is None
        assert not (args.no_compress or args.no_subset or args.verbose)

    def test_font_is_required(self, capsys):
        with pytest.raises(SystemExit):
            build_argument_parser().parse_args(['notes.txt'])


class TestLayout:

    def test_wrap_line(self, font_bytes):
        font = Font(font_bytes)
        # Every glyph is at least 500 units wide, so 'aaaa' needs over 20pt at 10pt
        assert wrap_line('aaaa bbbb', font, 10, 1000) == ['aaaa bbbb']
        assert wrap_line('aaaa bbbb', font, 10, 25) == ['aaaa', 'bbbb']
        assert wrap_line('', font, 10, 25) == ['']

    def test_long_words_are_broken(self, font_bytes):
        font = Font(font_bytes)
        lines = wrap_line('abcdefghijkl', font, 10, 25)
        assert ''.join(lines) == 'abcdefghijkl'
        assert all(font.text_width(line, 10) <= 25 for line in lines)

    def test_layout_adds_pages(self, font_bytes):
        document = Document('Long', 100, 60)
        font = Font(font_bytes)
        ref = document.add_font(font)
        pages = layout_text(document, ref, font, '\n'.join(['Line'] * 40), 12, 10)
        assert pages == len(document.pages) > 1


class TestMain:

    def test_writes_pdf(self, tmp_path, font_path, capsys):
        source = tmp_path / 'notes.txt'
        source.write_text('Hello World\nSecond line\n', encoding='utf-8')
        target = tmp_path / 'notes.pdf'

        status = main([str(source), '--font', str(font_path), '-o', str(target),
                       '--page-size', '100x100', '--author', 'Ada', '-v'])
        assert status == 0
        assert 'Wrote 1 page(s)' in capsys.readouterr().out

        reader = PdfReader(io.BytesIO(target.read_bytes()))
        assert reader.metadata.title == 'notes'
        assert reader.metadata.author == 'Ada'
        text = reader.pages[0].extract_text()
        assert 'Hello World' in text
        assert 'Second line' in text

    def test_uncompressed_output(self, tmp_path, font_path):
        source = tmp_path / 'plain.txt'
        source.write_text('Plain', encoding='utf-8')
        target = tmp_path / 'plain.pdf'
        assert main([str(source), '--font', str(font_path), '-o', str(target),
                     '--no-compress']) == 0
        assert b'/FlateDecode' not in target.read_bytes()

    def test_missing_input(self, tmp_path, font_path, capsys):
        status = main([str(tmp_path / 'absent.txt'), '--font', str(font_path)])
        assert status == 1
        assert 'not found' in capsys.readouterr().out

    def test_bad_font(self, tmp_path, capsys):
        source = tmp_path / 'notes.txt'
        source.write_text('Hi', encoding='utf-8')
        bogus = tmp_path / 'bogus.ttf'
        bogus.write_bytes(b'not a font at all')
        assert main([str(source), '--font', str(bogus)]) == 1
        assert "Cannot use font" in capsys.readouterr().out

    def test_bad_page_size(self, tmp_path, font_path, capsys):
        assert main(['notes.txt', '--font', str(font_path), '--page-size', 'B99']) == 1
        assert 'Invalid page size' in capsys.readouterr().out

    def test_margin_too_large(self, tmp_path, font_path, capsys):
        source = tmp_path / 'notes.txt'
        source.write_text('Hi', encoding='utf-8')
        status = main([str(source), '--font', str(font_path), '--page-size', '50x50',
                       '--margin', '30', '-o', str(tmp_path / 'out.pdf')])
        assert status == 1
        assert 'leaves no room' in capsys.readouterr().out
        assert not (tmp_path / 'out.pdf').exists()

    def test_unwritable_output(self, tmp_path, font_path, capsys):
        source = tmp_path / 'notes.txt'
        source.write_text('Hi', encoding='utf-8')
        target = tmp_path / 'missing' / 'out.pdf'
        assert main([str(source), '--font', str(font_path), '-o', str(target)]) == 1
        assert 'Could not write' in capsys.readouterr().out
