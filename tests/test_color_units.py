# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import math

import pytest

from printforge.core.color import BLACK, Cmyk, Greyscale, Rgb
from printforge.core.error import ConstructionError
from printforge.core.units import Mm, Pt, format_number, mm_to_pt, pt_to_mm


class TestColor:

    def test_operators(self):
        assert Rgb(1, 0, 0).fill_operator() == b'1 0 0 rg'
        assert Rgb(1, 0, 0).stroke_operator() == b'1 0 0 RG'
        assert Cmyk(0, 0.5, 0, 1).fill_operator() == b'0 0.5 0 1 k'
        assert Greyscale(0.25).stroke_operator() == b'0.25 G'

    @pytest.mark.parametrize('value', [-0.01, 1.01, math.nan, math.inf])
    def test_out_of_range_is_rejected_not_clamped(self, value):
        with pytest.raises(ConstructionError):
            Rgb(value, 0, 0)

    def test_rejects_bool_and_strings(self):
        with pytest.raises(ConstructionError):
            Greyscale(True)
        with pytest.raises(ConstructionError):
            Cmyk('0', 0, 0, 0)

    def test_equality_depends_on_space(self):
        assert Rgb(0, 0, 0) == Rgb(0.0, 0.0, 0.0)
        assert Greyscale(0) == BLACK
        assert Greyscale(0) != Rgb(0, 0, 0)
        assert len({Rgb(1, 0, 0), Rgb(1, 0, 0)}) == 1


class TestUnits:

    @pytest.mark.parametrize('mm', [210, 297])
    def test_round_trip(self, mm):
        assert abs(pt_to_mm(mm_to_pt(mm)) - mm) < 1e-6
        assert abs(Mm(mm).to_pt().to_mm() - mm) < 1e-6

    def test_inch(self):
        assert mm_to_pt(25.4) == pytest.approx(72.0)
        assert isinstance(Mm(1).to_pt(), Pt)
        assert Mm(1).to_pt() == pytest.approx(2.834646, abs=1e-6)

    @pytest.mark.parametrize('value, text', [
        (1.0, '1'),
        (0.5, '0.5'),
        (2.834645669, '2.8346'),
        (-0.00001, '0'),
        (100, '100'),
    ])
    def test_format_number(self, value, text):
        assert format_number(value) == text
