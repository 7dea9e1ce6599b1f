# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PDF Serializer Module

Turns a Document into pypdf objects and lets pypdf's PdfWriter emit the
bytes (object numbering, cross-reference table, trailer).

Objects are added in a fixed order so that saving an unchanged document
twice gives identical bytes:

1. document metadata: Info entries, XMP stream, trailer /ID
2. pages in creation order: page dictionary, merged content stream, one
   OCG per layer
3. resources in registration order: fonts, images, ICC profiles and form
   XObjects, each with its dependent objects
4. catalog entries that point back at the above (OCProperties,
   OutputIntents)
"""

import logging
import zlib

from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    ByteStringObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    NumberObject,
    RectangleObject,
    StreamObject,
    TextStringObject,
)

from ...core.resources import FONT, ICC_PROFILE, IMAGE, XOBJECT
from .cid_font_embedder import CIDFontEmbedder, generate_cid_tounicode_cmap

# Suppress noisy "Multiple definitions in dictionary" warnings from pypdf
logging.getLogger('pypdf').setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

PDF_HEADER = b'%PDF-1.6'

# Output intent defaults for the print condition
OUTPUT_CONDITION_IDENTIFIER = 'FOGRA39'
OUTPUT_CONDITION = 'Coated FOGRA39 (ISO 12647-2:2004)'
REGISTRY_NAME = 'http://www.color.org'


class PDFSerializer:
    """
    Build a PdfWriter holding every object of a document.

    Args:
        document: The Document to serialize
        compress: Flate-compress content, image and font streams
        subset_fonts: Embed only the glyphs the document draws
    """

    def __init__(self, document, compress=True, subset_fonts=True):
        self.document = document
        self.compress = compress
        self.cid_font_embedder = CIDFontEmbedder(subset_fonts=subset_fonts)
        self.writer = None
        self._resource_objects = {}  # Reference -> IndirectObject
        self._page_resources = []  # (Resources dict, {Reference: None}) per page
        self._ocgs = []  # (Layer, IndirectObject) in page/layer order

    def write(self, stream) -> None:
        """Serialize the document into a binary stream."""
        writer = self.build()
        writer.write(stream)

    def build(self) -> PdfWriter:
        """Create the writer and add every object in document order."""
        self.writer = PdfWriter()
        self.writer.pdf_header = PDF_HEADER
        self._resource_objects = {}
        self._page_resources = []
        self._ocgs = []

        self._add_metadata()
        for page in self.document.pages:
            self._add_page(page)
        for ref, resource in self.document.resources.items():
            self._resource_objects[ref] = self._add_resource(ref, resource)
        self._fill_page_resources()
        self._add_optional_content()
        self._add_output_intent()

        logger.debug("serialized %d page(s), %d resource(s)",
                     len(self.document.pages), len(self._resource_objects))
        return self.writer

    # -- streams -----------------------------------------------------------

    def _stream(self, data, compress=None, **entries):
        """
        Create a StreamObject, Flate-compressed unless disabled.

        Args:
            data: Raw stream bytes
            compress: Override the serializer's compression setting
            entries: Extra dictionary entries; values must be pypdf objects
        """
        if compress is None:
            compress = self.compress
        stream = StreamObject()
        for key, value in entries.items():
            stream[NameObject('/' + key)] = value
        if compress:
            data = zlib.compress(data)
            stream[NameObject('/Filter')] = NameObject('/FlateDecode')
        stream._data = data
        stream[NameObject('/Length')] = NumberObject(len(data))
        return stream

    # -- metadata ----------------------------------------------------------

    def _add_metadata(self):
        writer = self.writer
        metadata = self.document.metadata

        writer.add_metadata({key: value for key, value in metadata.info_entries()})
        if writer._info is not None:
            trapped = '/True' if metadata.trapping else '/False'
            writer._info.get_object()[NameObject('/Trapped')] = NameObject(trapped)

        xmp = self._stream(metadata.xmp_packet(), compress=False,
                           Type=NameObject('/Metadata'), Subtype=NameObject('/XML'))
        writer._root_object[NameObject('/Metadata')] = writer._add_object(xmp)

        writer._ID = ArrayObject([
            ByteStringObject(_id_bytes(metadata.document_id)),
            ByteStringObject(_id_bytes(metadata.instance_id())),
        ])

    # -- pages ---------------------------------------------------------------

    def _add_page(self, page):
        writer = self.writer
        pdf_page = writer.add_blank_page(page.width_pt, page.height_pt)
        box = RectangleObject([0, 0, page.width_pt, page.height_pt])
        pdf_page[NameObject('/TrimBox')] = box
        pdf_page[NameObject('/CropBox')] = RectangleObject(box)
        pdf_page[NameObject('/Rotate')] = NumberObject(0)

        properties = DictionaryObject()
        used = {}
        parts = []
        for layer in page.layers:
            ocg = DictionaryObject()
            ocg[NameObject('/Type')] = NameObject('/OCG')
            ocg[NameObject('/Name')] = TextStringObject(layer.name)
            ocg[NameObject('/Usage')] = _ocg_usage(layer)
            ocg_ref = writer._add_object(ocg)
            self._ocgs.append((layer, ocg_ref))
            properties[NameObject('/' + layer.oc_name)] = ocg_ref

            parts.append(f'/OC /{layer.oc_name} BDC\nq\n'.encode())
            parts.append(layer.stream.to_bytes())
            parts.append(b'\nQ\nEMC\n')
            used.update(layer.stream.resources_used)

        contents = self._stream(b''.join(parts))
        pdf_page[NameObject('/Contents')] = writer._add_object(contents)

        resources = DictionaryObject()
        resources[NameObject('/ProcSet')] = ArrayObject(
            [NameObject(n) for n in ('/PDF', '/Text', '/ImageB', '/ImageC')])
        if len(properties):
            resources[NameObject('/Properties')] = properties
        pdf_page[NameObject('/Resources')] = resources
        self._page_resources.append((resources, used))

    def _fill_page_resources(self):
        """Point each page's resource names at the resource objects."""
        for resources, used in self._page_resources:
            fonts = DictionaryObject()
            xobjects = DictionaryObject()
            for ref in used:
                target = fonts if ref.KIND == FONT else xobjects
                target[NameObject('/' + ref.name)] = self._resource_objects[ref]
            if len(fonts):
                resources[NameObject('/Font')] = fonts
            if len(xobjects):
                resources[NameObject('/XObject')] = xobjects

    # -- resources -----------------------------------------------------------

    def _add_resource(self, ref, resource):
        if ref.KIND == FONT:
            return self._embed_cid_font(ref, resource)
        if ref.KIND == IMAGE:
            return self._add_image(resource)
        if ref.KIND == ICC_PROFILE:
            return self._add_icc_profile(resource)
        if ref.KIND == XOBJECT:
            return self._add_form(resource)
        raise TypeError(f"cannot serialize {type(resource).__name__}")

    def _embed_cid_font(self, ref, font):
        """
        Embed a TrueType/OpenType font as a PDF Type 0 font.

        Builds the PDF Type 0 structure:
          Type 0 Font -> /Subtype /Type0, /Encoding /Identity-H,
                         /DescendantFonts [CIDFont]
          CIDFont -> /Subtype /CIDFontType2 (or /CIDFontType0 for CFF),
                     /CIDSystemInfo, /W, /DW, /CIDToGIDMap /Identity
          FontDescriptor -> /FontFile2 (or /FontFile3 /OpenType)
          ToUnicode -> CMap stream with 2-byte codespace

        Args:
            ref: FontRef the font was registered under
            font: Font resource

        Returns:
            IndirectObject of the Type 0 font dictionary
        """
        writer = self.writer
        embedder = self.cid_font_embedder
        usage = self.document.font_tracker.usage_for(ref)
        glyph_map = usage.glyph_map if usage is not None else {}
        glyphs_used = set(glyph_map)

        base_font = embedder.get_base_font_name(font, glyphs_used)
        font_file_data = embedder.get_font_file_data(font, glyphs_used)

        if font.program.is_cff:
            font_file_stream = self._stream(font_file_data, Subtype=NameObject('/OpenType'))
        else:
            font_file_stream = self._stream(font_file_data,
                                            Length1=NumberObject(len(font_file_data)))
        font_file_ref = writer._add_object(font_file_stream)

        metrics = embedder.get_font_metrics(font)
        bbox = metrics['bbox']

        font_descriptor = DictionaryObject()
        font_descriptor[NameObject('/Type')] = NameObject('/FontDescriptor')
        font_descriptor[NameObject('/FontName')] = NameObject('/' + base_font)
        font_descriptor[NameObject('/Flags')] = NumberObject(metrics['flags'])
        font_descriptor[NameObject('/FontBBox')] = ArrayObject([
            NumberObject(bbox[0]), NumberObject(bbox[1]),
            NumberObject(bbox[2]), NumberObject(bbox[3]),
        ])
        font_descriptor[NameObject('/ItalicAngle')] = FloatObject(metrics['italic_angle'])
        font_descriptor[NameObject('/Ascent')] = NumberObject(metrics['ascent'])
        font_descriptor[NameObject('/Descent')] = NumberObject(metrics['descent'])
        font_descriptor[NameObject('/CapHeight')] = NumberObject(metrics['cap_height'])
        font_descriptor[NameObject('/StemV')] = NumberObject(metrics['stem_v'])
        file_key = '/FontFile3' if font.program.is_cff else '/FontFile2'
        font_descriptor[NameObject(file_key)] = font_file_ref
        font_descriptor_ref = writer._add_object(font_descriptor)

        glyph_widths = embedder.get_glyph_widths(font, glyphs_used)
        w_array = _build_pdf_w_array(embedder.build_w_array(glyph_widths))

        registry, ordering, supplement = embedder.get_cid_system_info()
        cid_system_info = DictionaryObject()
        cid_system_info[NameObject('/Registry')] = _make_pdf_string(registry)
        cid_system_info[NameObject('/Ordering')] = _make_pdf_string(ordering)
        cid_system_info[NameObject('/Supplement')] = NumberObject(supplement)

        cid_font_dict = DictionaryObject()
        cid_font_dict[NameObject('/Type')] = NameObject('/Font')
        cid_font_dict[NameObject('/Subtype')] = NameObject(
            '/CIDFontType0' if font.program.is_cff else '/CIDFontType2')
        cid_font_dict[NameObject('/BaseFont')] = NameObject('/' + base_font)
        cid_font_dict[NameObject('/CIDSystemInfo')] = cid_system_info
        cid_font_dict[NameObject('/FontDescriptor')] = font_descriptor_ref
        cid_font_dict[NameObject('/DW')] = NumberObject(embedder.get_default_width(font))
        if w_array:
            cid_font_dict[NameObject('/W')] = w_array
        if not font.program.is_cff:
            cid_font_dict[NameObject('/CIDToGIDMap')] = NameObject('/Identity')
        cid_font_ref = writer._add_object(cid_font_dict)

        tounicode_ref = None
        if glyph_map:
            cmap_data = generate_cid_tounicode_cmap(glyph_map, base_font)
            tounicode_ref = writer._add_object(self._stream(cmap_data))

        font_obj = DictionaryObject()
        font_obj[NameObject('/Type')] = NameObject('/Font')
        font_obj[NameObject('/Subtype')] = NameObject('/Type0')
        font_obj[NameObject('/BaseFont')] = NameObject('/' + base_font)
        font_obj[NameObject('/Encoding')] = NameObject('/Identity-H')
        font_obj[NameObject('/DescendantFonts')] = ArrayObject([cid_font_ref])
        if tounicode_ref:
            font_obj[NameObject('/ToUnicode')] = tounicode_ref

        logger.debug("embedded font %s as %s (%d glyphs)", font.name, ref.name,
                     len(glyphs_used))
        return writer._add_object(font_obj)

    def _add_image(self, image):
        writer = self.writer
        entries = _image_entries(image.width, image.height)
        entries['ColorSpace'] = NameObject('/' + image.color_space)
        if image.smask is not None:
            smask_entries = _image_entries(image.width, image.height)
            smask_entries['ColorSpace'] = NameObject('/DeviceGray')
            smask = self._stream(image.smask, **smask_entries)
            entries['SMask'] = writer._add_object(smask)
        return writer._add_object(self._stream(image.samples, **entries))

    def _add_icc_profile(self, profile):
        stream = self._stream(profile.data, N=NumberObject(profile.components),
                              Alternate=NameObject('/' + profile.alternate))
        return self.writer._add_object(stream)

    def _add_form(self, vector):
        bbox = ArrayObject([FloatObject(round(v, 4)) for v in vector.bbox()])
        stream = self._stream(vector.stream.to_bytes(),
                              Type=NameObject('/XObject'), Subtype=NameObject('/Form'),
                              FormType=NumberObject(1), BBox=bbox,
                              Resources=DictionaryObject())
        return self.writer._add_object(stream)

    # -- catalog -------------------------------------------------------------

    def _add_optional_content(self):
        if not self._ocgs:
            return
        ocgs = ArrayObject([ocg_ref for _, ocg_ref in self._ocgs])
        on = ArrayObject([ocg_ref for layer, ocg_ref in self._ocgs if layer.visible])
        off = ArrayObject([ocg_ref for layer, ocg_ref in self._ocgs if not layer.visible])

        default = DictionaryObject()
        default[NameObject('/Order')] = ArrayObject(list(ocgs))
        default[NameObject('/ON')] = on
        default[NameObject('/OFF')] = off
        default[NameObject('/BaseState')] = NameObject('/ON')

        properties = DictionaryObject()
        properties[NameObject('/OCGs')] = ocgs
        properties[NameObject('/D')] = default
        self.writer._root_object[NameObject('/OCProperties')] = properties

    def _add_output_intent(self):
        profile_ref = self.document.output_profile

        intent = DictionaryObject()
        intent[NameObject('/Type')] = NameObject('/OutputIntent')
        intent[NameObject('/S')] = NameObject('/GTS_PDFX')
        intent[NameObject('/OutputConditionIdentifier')] = TextStringObject(
            OUTPUT_CONDITION_IDENTIFIER)
        intent[NameObject('/OutputCondition')] = TextStringObject(OUTPUT_CONDITION)
        intent[NameObject('/RegistryName')] = TextStringObject(REGISTRY_NAME)
        info = OUTPUT_CONDITION
        if profile_ref is not None:
            profile = self.document.resources.resolve(profile_ref, ICC_PROFILE)
            info = profile.description or OUTPUT_CONDITION
            intent[NameObject('/DestOutputProfile')] = self._resource_objects[profile_ref]
        intent[NameObject('/Info')] = TextStringObject(info)
        self.writer._root_object[NameObject('/OutputIntents')] = ArrayObject(
            [self.writer._add_object(intent)])


def _ocg_usage(layer):
    view = DictionaryObject()
    view[NameObject('/ViewState')] = NameObject('/ON' if layer.visible else '/OFF')
    printing = DictionaryObject()
    printing[NameObject('/PrintState')] = NameObject('/ON' if layer.printable else '/OFF')
    usage = DictionaryObject()
    usage[NameObject('/View')] = view
    usage[NameObject('/Print')] = printing
    return usage


def _image_entries(width, height):
    return {
        'Type': NameObject('/XObject'),
        'Subtype': NameObject('/Image'),
        'Width': NumberObject(width),
        'Height': NumberObject(height),
        'BitsPerComponent': NumberObject(8),
    }


def _build_pdf_w_array(w_array_data):
    """
    Convert W array data to pypdf ArrayObject.

    Args:
        w_array_data: List of alternating start_cid (int) and width lists

    Returns:
        ArrayObject or None if empty
    """
    if not w_array_data:
        return None

    result = ArrayObject()
    for i in range(0, len(w_array_data), 2):
        result.append(NumberObject(w_array_data[i]))
        result.append(ArrayObject([NumberObject(w) for w in w_array_data[i + 1]]))
    return result


def _make_pdf_string(text):
    """PDF string object for an ASCII/Latin-1 Python string."""
    return ByteStringObject(text.encode('latin-1'))


def _id_bytes(identifier):
    """Trailer /ID entry: hex digits as raw bytes, anything else as UTF-8."""
    try:
        return bytes.fromhex(identifier)
    except ValueError:
        return identifier.encode('utf-8')
