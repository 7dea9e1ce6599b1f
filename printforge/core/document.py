# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Document

Root aggregate of PrintForge. A Document owns its pages (which own their
layers), the resource pool, the per-document font usage and the metadata.

The document is the builder capability: resources are registered here and
come back as references. Layers are the drawing capability and only ever
see a read-only resolver.

A document is not thread-safe. Code that shares one between threads must
hold Document.lock around every registration, drawing call and save.
"""

from __future__ import annotations

import datetime
import logging
import threading

from ..devices.pdf.font_tracker import FontTracker
from .error import ConstructionError
from .font import Font, decode_glyphs
from .icc_profile import IccProfile
from .image import Image
from .layer import Layer
from .metadata import DocumentMetadata, as_utc
from .page import Page
from .resources import FONT, ICC_PROFILE, FontRef, IccProfileRef, ImageRef, ResourcePool, XObjectRef
from .xobject import VectorObject

logger = logging.getLogger(__name__)

DEFAULT_LAYER_NAME = 'Layer 1'


class Document:
    """
    A PDF document under construction.

    Args:
        title: Document title, written to the Info dictionary and XMP
        width: Default page width in millimeters
        height: Default page height in millimeters
        layer_name: Name of the first page's first layer
        creation_date: Creation timestamp; now (UTC) when omitted
    """

    def __init__(self, title: str, width: float = 210.0, height: float = 297.0,
                 layer_name: str = DEFAULT_LAYER_NAME,
                 creation_date: datetime.datetime | None = None) -> None:
        self.metadata = DocumentMetadata(title, creation_date)
        self.resources = ResourcePool()
        self.font_tracker = FontTracker()
        self.pages: list[Page] = []
        self.output_profile: IccProfileRef | None = None
        self.lock = threading.RLock()
        self.saved = False
        self.default_width = width
        self.default_height = height
        self.first_page, self.first_layer = self.add_page(width, height, layer_name)

    @property
    def title(self) -> str:
        return self.metadata.title

    # -- pages and layers ------------------------------------------------------

    def add_page(self, width: float | None = None, height: float | None = None,
                 layer_name: str = DEFAULT_LAYER_NAME) -> tuple[Page, Layer]:
        """
        Append a page with one layer.

        Args:
            width, height: Page size in millimeters; the document defaults
                           when omitted
            layer_name: Name of the page's first layer

        Returns:
            tuple: (Page, Layer)
        """
        page = Page(self, len(self.pages),
                    self.default_width if width is None else width,
                    self.default_height if height is None else height)
        self.pages.append(page)
        layer = page.add_layer(layer_name)
        logger.debug("added %r", page)
        return page, layer

    def add_layer(self, page: Page, name: str, visible: bool = True,
                  printable: bool = True) -> Layer:
        """Add a layer to one of this document's pages."""
        self._check_page(page)
        return page.add_layer(name, visible=visible, printable=printable)

    def get_page(self, index: int) -> Page:
        return self.pages[index]

    def get_layer(self, page: Page | int, index: int) -> Layer:
        if isinstance(page, int):
            page = self.get_page(page)
        self._check_page(page)
        return page.layers[index]

    def owns(self, layer: Layer) -> bool:
        """Whether a layer belongs to one of this document's pages."""
        return isinstance(layer, Layer) and layer.page.document is self

    def _check_page(self, page: Page) -> None:
        if not isinstance(page, Page) or page.document is not self:
            raise ConstructionError(f"{page!r} belongs to a different document")

    # -- resource registration ---------------------------------------------------

    def add_font(self, font) -> FontRef:
        """
        Register a TrueType/OpenType font.

        Args:
            font: Font instance, font file path, binary file object or raw bytes

        Raises:
            CorruptFontError: unreadable font program
            UnsupportedFontError: no outline data
        """
        if not isinstance(font, Font):
            if isinstance(font, (bytes, bytearray, memoryview)):
                font = Font(bytes(font))
            else:
                font = Font.from_file(font)
        return self.resources.register(font)

    def add_image(self, image) -> ImageRef:
        """Register a decoded image (printforge Image or Pillow image)."""
        if not isinstance(image, Image):
            image = Image.from_pil(image)
        return self.resources.register(image)

    def add_image_bytes(self, data: bytes) -> ImageRef:
        """Register encoded image bytes, decoded with Pillow."""
        return self.resources.register(Image.from_bytes(data))

    def add_icc_profile(self, profile) -> IccProfileRef:
        """Register an ICC profile from an IccProfile or raw bytes."""
        if not isinstance(profile, IccProfile):
            profile = IccProfile(bytes(profile))
        return self.resources.register(profile)

    def add_vector_object(self, commands, width: float, height: float) -> XObjectRef:
        """
        Register a form XObject built from vector drawing commands.

        Args:
            commands: (method name, args[, kwargs]) tuples of ContentStream
                      drawing operations
            width, height: Form size in millimeters
        """
        return self.resources.register(VectorObject(commands, width, height))

    def set_output_profile(self, ref: IccProfileRef) -> None:
        """Use a registered ICC profile as the document's output intent."""
        self.resources.resolve(ref, ICC_PROFILE)
        self.output_profile = ref

    # -- fonts -----------------------------------------------------------------

    def glyph_map(self, font_ref: FontRef) -> dict[int, str]:
        """Glyph id -> Unicode text recorded for a font, for text extraction."""
        self.resources.resolve(font_ref, FONT)
        usage = self.font_tracker.usage_for(font_ref)
        return dict(usage.glyph_map) if usage is not None else {}

    def decode_text(self, font_ref: FontRef, encoded: bytes) -> str:
        """Recover text from an Identity-H string drawn with font_ref."""
        return decode_glyphs(encoded, self.glyph_map(font_ref))

    # -- metadata ----------------------------------------------------------------

    def with_title(self, title: str) -> Document:
        self.metadata.title = str(title)
        return self

    def with_author(self, author: str) -> Document:
        self.metadata.author = str(author)
        return self

    def with_creator(self, creator: str) -> Document:
        self.metadata.creator = str(creator)
        return self

    def with_producer(self, producer: str) -> Document:
        self.metadata.producer = str(producer)
        return self

    def with_subject(self, subject: str) -> Document:
        self.metadata.subject = str(subject)
        return self

    def with_keywords(self, keywords) -> Document:
        self.metadata.keywords = [str(k) for k in keywords]
        return self

    def with_identifier(self, identifier: str) -> Document:
        self.metadata.identifier = str(identifier)
        return self

    def with_trapping(self, trapping: bool) -> Document:
        self.metadata.trapping = bool(trapping)
        return self

    def with_document_id(self, document_id: str) -> Document:
        self.metadata.document_id = document_id
        return self

    def with_document_version(self, version: int) -> Document:
        self.metadata.document_version = int(version)
        return self

    def with_conformance(self, conformance: str) -> Document:
        """PDF/X label written as GTS_PDFXVersion; '' writes none."""
        self.metadata.conformance = str(conformance)
        return self

    def with_creation_date(self, value: datetime.datetime) -> Document:
        self.metadata.creation_date = as_utc(value)
        return self

    def with_mod_date(self, value: datetime.datetime) -> Document:
        self.metadata.modification_date = as_utc(value)
        return self

    # -- output ------------------------------------------------------------------

    def save(self, target, options=None, compress: bool | None = None) -> None:
        """
        Write the document as PDF to a path or a binary writable object.

        Args:
            target: Destination path or object with write()
            options: SaveOptions; defaults apply when omitted
            compress: Shortcut overriding options.compress

        Raises:
            SerializationError: the destination was left untouched
        """
        from ..devices.pdf import pdf

        with self.lock:
            pdf.save(self, target, self._save_options(options, compress))
            self.saved = True

    def save_to_bytes(self, options=None, compress: bool | None = None) -> bytes:
        """Serialize the document and return the PDF bytes."""
        from ..devices.pdf import pdf

        with self.lock:
            data = pdf.render_to_bytes(self, self._save_options(options, compress))
            self.saved = True
            return data

    @staticmethod
    def _save_options(options, compress):
        from ..devices.pdf.pdf import SaveOptions

        if options is None:
            options = SaveOptions()
        if compress is not None:
            options = SaveOptions(compress=bool(compress), subset_fonts=options.subset_fonts)
        return options

    def __repr__(self) -> str:
        return f'Document({self.title!r}, {len(self.pages)} page(s))'
