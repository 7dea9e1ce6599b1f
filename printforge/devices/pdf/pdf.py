# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PDF Output Device

Saves a Document as a PDF file. The whole file is produced in memory first;
nothing reaches the destination unless serialization succeeded:

- file paths: the bytes go to a temporary file in the destination directory,
  which is then renamed over the destination with os.replace
- writable streams: the bytes are written in one call after success

Any failure while building or writing is raised as SerializationError, with
the original exception chained.
"""

from __future__ import annotations

import dataclasses
import io
import logging
import os
import tempfile

from ...core.error import SerializationError
from .pdf_serializer import PDFSerializer

logger = logging.getLogger(__name__)

# Set to 1 to write uncompressed streams by default, for reading PDFs in a text editor
DEBUG_ENV_VAR = 'PRINTFORGE_DEBUG'


def _debug_enabled() -> bool:
    return os.environ.get(DEBUG_ENV_VAR, '').strip() not in ('', '0')


@dataclasses.dataclass
class SaveOptions:
    """
    Settings for one save.

    Attributes:
        compress: Flate-compress streams; off by default when PRINTFORGE_DEBUG is set
        subset_fonts: Embed only the glyphs used by the document
    """
    compress: bool = dataclasses.field(default_factory=lambda: not _debug_enabled())
    subset_fonts: bool = True


def render_to_bytes(document, options: SaveOptions | None = None) -> bytes:
    """
    Serialize a document to PDF bytes.

    Raises:
        SerializationError: raw object construction or writing failed
    """
    if options is None:
        options = SaveOptions()
    serializer = PDFSerializer(document, compress=options.compress,
                               subset_fonts=options.subset_fonts)
    buffer = io.BytesIO()
    try:
        serializer.write(buffer)
    except SerializationError:
        raise
    except Exception as exc:
        raise SerializationError(f"could not serialize document: {exc}") from exc
    data = buffer.getvalue()
    logger.debug("rendered %d bytes (compress=%s, subset=%s)", len(data),
                 options.compress, options.subset_fonts)
    return data


def save(document, target, options: SaveOptions | None = None) -> None:
    """
    Save a document to a path or a binary writable object.

    Args:
        document: Document to save
        target: str/os.PathLike destination, or an object with write()
        options: SaveOptions; defaults apply when omitted

    Raises:
        SerializationError: nothing was written to target
    """
    data = render_to_bytes(document, options)
    if hasattr(target, 'write'):
        try:
            target.write(data)
        except Exception as exc:
            raise SerializationError(f"could not write PDF to stream: {exc}") from exc
        return
    _write_file(os.fspath(target), data)


def _write_file(path: str, data: bytes) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix='.printforge-', suffix='.pdf.tmp',
                                        dir=directory)
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as exc:
        raise SerializationError(f"could not write {path}: {exc}") from exc
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.debug("could not remove temporary file %s", tmp_path)
    logger.info("wrote %s (%d bytes)", path, len(data))
