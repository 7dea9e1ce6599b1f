# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from printforge.core.document import Document
from printforge.core.error import ResourceError
from printforge.core.font import Font
from printforge.core.icc_profile import IccProfile
from printforge.core.image import Image
from printforge.core.resources import (
    FONT, IMAGE, FontRef, ImageRef, Reference, ResourcePool,
)


def gray_image():
    return Image(2, 2, 'DeviceGray', bytes([0, 64, 128, 255]))


class TestResourcePool:

    def test_references_are_typed_and_named(self, font_bytes):
        pool = ResourcePool()
        font_ref = pool.register(Font(font_bytes))
        image_ref = pool.register(gray_image())
        assert isinstance(font_ref, FontRef)
        assert isinstance(image_ref, ImageRef)
        assert font_ref.name == 'F1'
        assert image_ref.name == 'Im1'
        assert pool.register(gray_image()).name == 'Im2'

    def test_identical_content_is_not_deduplicated(self):
        pool = ResourcePool()
        first = pool.register(gray_image())
        second = pool.register(gray_image())
        assert first != second
        assert pool.resolve(first) is not pool.resolve(second)
        assert len(pool.items(IMAGE)) == 2

    def test_type_mismatch(self, font_bytes):
        pool = ResourcePool()
        image_ref = pool.register(gray_image())
        with pytest.raises(ResourceError, match='type mismatch'):
            pool.resolve(image_ref, FONT)

    def test_foreign_reference(self):
        pool, other = ResourcePool(), ResourcePool()
        ref = other.register(gray_image())
        with pytest.raises(ResourceError):
            pool.resolve(ref)

    def test_unregistered_reference(self):
        pool = ResourcePool()
        pool.register(gray_image())
        with pytest.raises(ResourceError):
            pool.resolve(ImageRef(pool.pool_id, 5))

    def test_not_a_reference(self):
        with pytest.raises(ResourceError):
            ResourcePool().resolve('F1')

    def test_references_are_immutable_and_hashable(self):
        ref = ImageRef(1, 0)
        with pytest.raises(AttributeError):
            ref._index = 3
        assert {ref: 1}[ImageRef(1, 0)] == 1
        assert ImageRef(1, 0) != FontRef(1, 0)
        assert isinstance(ref, Reference)

    def test_items_keep_registration_order(self, font_bytes):
        pool = ResourcePool()
        refs = [pool.register(gray_image()), pool.register(Font(font_bytes)),
                pool.register(gray_image())]
        assert [ref for ref, _ in pool.items()] == refs
        assert len(pool) == 3

    def test_resolver_is_read_only(self):
        pool = ResourcePool()
        ref = pool.register(gray_image())
        resolver = pool.resolver()
        assert resolver.resolve(ref, IMAGE) is pool.resolve(ref)
        assert not hasattr(resolver, 'register')


class TestImages:

    def test_sample_length_is_checked(self):
        with pytest.raises(ResourceError):
            Image(2, 2, 'DeviceRGB', b'\x00' * 5)

    def test_undecodable_bytes(self):
        with pytest.raises(ResourceError):
            Image.from_bytes(b'definitely not an image')

    def test_png_with_alpha_gets_smask(self):
        from PIL import Image as PILImage
        import io

        pil = PILImage.new('RGBA', (3, 2), (255, 0, 0, 128))
        buf = io.BytesIO()
        pil.save(buf, format='PNG')
        image = Image.from_bytes(buf.getvalue())
        assert image.color_space == 'DeviceRGB'
        assert image.samples == bytes([255, 0, 0]) * 6
        assert image.smask == bytes([128]) * 6

    def test_opaque_alpha_is_dropped(self):
        from PIL import Image as PILImage

        image = Image.from_pil(PILImage.new('RGBA', (2, 2), (0, 255, 0, 255)))
        assert image.smask is None

    def test_other_modes_are_converted(self):
        from PIL import Image as PILImage

        image = Image.from_pil(PILImage.new('1', (4, 1), 1))
        assert image.color_space == 'DeviceGray'
        assert len(image.samples) == 4

    def test_default_size_uses_dpi(self):
        image = Image(300, 150, 'DeviceGray', b'\x00' * 45000, dpi=300)
        width, height = image.default_size_mm()
        assert width == pytest.approx(25.4)
        assert height == pytest.approx(12.7)


class TestIccProfiles:

    def test_srgb_profile(self, srgb_profile_bytes):
        profile = IccProfile(srgb_profile_bytes)
        assert profile.components == 3
        assert profile.alternate == 'DeviceRGB'

    def test_missing_signature(self):
        with pytest.raises(ResourceError):
            IccProfile(b'\x00' * 200)


class TestDocumentRegistration:

    def test_same_bytes_registered_twice(self, document, font_bytes):
        first = document.add_font(font_bytes)
        second = document.add_font(font_bytes)
        assert first != second
        assert (first.name, second.name) == ('F1', 'F2')

    def test_font_from_path_and_file_object(self, document, font_path):
        by_path = document.add_font(str(font_path))
        with open(font_path, 'rb') as f:
            by_stream = document.add_font(f)
        assert by_path != by_stream

    def test_reference_from_other_document_is_rejected(self, document, font_bytes):
        other = Document('Other', 100, 100)
        foreign = other.add_font(font_bytes)
        with pytest.raises(ResourceError):
            document.first_layer.write_text('Hi', 12, 0, 10, 10, foreign)

    def test_output_profile_must_be_icc(self, document):
        image_ref = document.add_image(gray_image())
        with pytest.raises(ResourceError, match='type mismatch'):
            document.set_output_profile(image_ref)

    def test_glyph_map_needs_a_font_reference(self, document):
        image_ref = document.add_image(gray_image())
        with pytest.raises(ResourceError, match='type mismatch'):
            document.glyph_map(image_ref)
        with pytest.raises(ResourceError, match='type mismatch'):
            document.decode_text(image_ref, b'\x00\x01')
