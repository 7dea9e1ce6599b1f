# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Document metadata.

The same values feed the Info dictionary and the XMP metadata stream, so the
two never disagree (preflight tools reject files where they do). Timestamps
are taken once when the metadata is created; saving twice therefore writes
the same dates and the same document id.
"""

from __future__ import annotations

import datetime
import hashlib
from xml.sax.saxutils import escape

DEFAULT_PRODUCER = 'PrintForge'

# GTS_PDFXVersion labels
PDFX_3_2002 = 'PDF/X-3:2002'
PDFX_3_2003 = 'PDF/X-3:2003'
PDFX_4 = 'PDF/X-4'
PDFX_NONE = ''


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc).replace(microsecond=0)


def to_pdf_date(value: datetime.datetime) -> str:
    """PDF date string, e.g. D:20170505150224+00'00'."""
    value = as_utc(value)
    return value.strftime("D:%Y%m%d%H%M%S+00'00'")


def to_xmp_date(value: datetime.datetime) -> str:
    return as_utc(value).strftime('%Y-%m-%dT%H:%M:%S+00:00')


class DocumentMetadata:
    """Title, authorship, dates and print settings of a document."""

    def __init__(self, title: str, creation_date: datetime.datetime | None = None) -> None:
        self.title = str(title)
        self.author = ''
        self.creator = ''
        self.producer = DEFAULT_PRODUCER
        self.subject = ''
        self.keywords: list[str] = []
        self.identifier = ''
        self.trapping = False
        self.document_version = 1
        self.conformance = PDFX_3_2002
        self.creation_date = as_utc(creation_date) if creation_date else _utc_now()
        self.modification_date = self.creation_date
        self._document_id: str | None = None

    @property
    def document_id(self) -> str:
        """32 hex digits; derived from title and creation date unless set."""
        if self._document_id is not None:
            return self._document_id
        digest = hashlib.md5(
            f'{self.title}\x00{self.creation_date.isoformat()}'.encode('utf-8'))
        return digest.hexdigest().upper()

    @document_id.setter
    def document_id(self, value: str) -> None:
        self._document_id = str(value)

    def instance_id(self) -> str:
        """Second trailer /ID entry; changes with the document version."""
        digest = hashlib.md5(
            f'{self.document_id}\x00{self.document_version}\x00'
            f'{self.modification_date.isoformat()}'.encode('utf-8'))
        return digest.hexdigest().upper()

    def info_entries(self) -> list[tuple[str, str]]:
        """Info dictionary entries, in output order."""
        entries = [
            ('/Title', self.title),
            ('/Author', self.author),
            ('/Creator', self.creator),
            ('/Producer', self.producer),
            ('/Subject', self.subject),
            ('/Keywords', ', '.join(self.keywords)),
            ('/Identifier', self.identifier),
            ('/CreationDate', to_pdf_date(self.creation_date)),
            ('/ModDate', to_pdf_date(self.modification_date)),
        ]
        if self.conformance:
            entries.append(('/GTS_PDFXVersion', self.conformance))
        return entries

    def xmp_packet(self) -> bytes:
        """XMP metadata mirroring the Info dictionary."""
        e = escape
        keywords = ', '.join(self.keywords)
        pdfx = ''
        if self.conformance:
            pdfx = (
                '  <rdf:Description rdf:about="" '
                'xmlns:pdfxid="http://www.npes.org/pdfx/ns/id/">\n'
                f'   <pdfxid:GTS_PDFXVersion>{e(self.conformance)}</pdfxid:GTS_PDFXVersion>\n'
                '  </rdf:Description>\n'
            )
        packet = (
            '<?xpacket begin="﻿" id="W5M0MpCehiHzreSzNTczkc9d"?>\n'
            '<x:xmpmeta xmlns:x="adobe:ns:meta/">\n'
            ' <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">\n'
            '  <rdf:Description rdf:about="" xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
            '   <dc:format>application/pdf</dc:format>\n'
            f'   <dc:title><rdf:Alt><rdf:li xml:lang="x-default">{e(self.title)}'
            '</rdf:li></rdf:Alt></dc:title>\n'
            f'   <dc:creator><rdf:Seq><rdf:li>{e(self.author)}</rdf:li></rdf:Seq></dc:creator>\n'
            f'   <dc:description><rdf:Alt><rdf:li xml:lang="x-default">{e(self.subject)}'
            '</rdf:li></rdf:Alt></dc:description>\n'
            '  </rdf:Description>\n'
            '  <rdf:Description rdf:about="" xmlns:xmp="http://ns.adobe.com/xap/1.0/">\n'
            f'   <xmp:CreateDate>{to_xmp_date(self.creation_date)}</xmp:CreateDate>\n'
            f'   <xmp:ModifyDate>{to_xmp_date(self.modification_date)}</xmp:ModifyDate>\n'
            f'   <xmp:MetadataDate>{to_xmp_date(self.modification_date)}</xmp:MetadataDate>\n'
            f'   <xmp:CreatorTool>{e(self.creator)}</xmp:CreatorTool>\n'
            '  </rdf:Description>\n'
            '  <rdf:Description rdf:about="" xmlns:pdf="http://ns.adobe.com/pdf/1.3/">\n'
            f'   <pdf:Producer>{e(self.producer)}</pdf:Producer>\n'
            f'   <pdf:Keywords>{e(keywords)}</pdf:Keywords>\n'
            f'   <pdf:Trapped>{"True" if self.trapping else "False"}</pdf:Trapped>\n'
            '  </rdf:Description>\n'
            '  <rdf:Description rdf:about="" xmlns:xmpMM="http://ns.adobe.com/xap/1.0/mm/">\n'
            f'   <xmpMM:DocumentID>uuid:{_as_uuid(self.document_id)}</xmpMM:DocumentID>\n'
            f'   <xmpMM:InstanceID>uuid:{_as_uuid(self.instance_id())}</xmpMM:InstanceID>\n'
            f'   <xmpMM:VersionID>{self.document_version}</xmpMM:VersionID>\n'
            '  </rdf:Description>\n'
            f'{pdfx}'
            ' </rdf:RDF>\n'
            '</x:xmpmeta>\n'
            '<?xpacket end="w"?>'
        )
        return packet.encode('utf-8')


def _as_uuid(hex_digits: str) -> str:
    h = (hex_digits.lower() + '0' * 32)[:32]
    return f'{h[:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:]}'
