# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PrintForge error types.

Construction, resource and font errors are raised at the call that caused
them. Serialization errors only surface from save, and a failed save never
leaves partial bytes at the destination.
"""


class PrintForgeError(Exception):
    """Base class for all PrintForge errors."""


class ConstructionError(PrintForgeError, ValueError):
    """Invalid geometry, color or text input."""


class MalformedPathError(ConstructionError):
    """Bezier handle points are not grouped in pairs before an anchor point."""


class ResourceError(PrintForgeError, LookupError):
    """Unregistered, foreign or type-mismatched resource reference."""


class FontError(PrintForgeError):
    """Font program could not be used."""


class CorruptFontError(FontError):
    """Font program has an unreadable table directory or truncated tables."""


class UnsupportedFontError(FontError):
    """Font program is readable but carries no usable outline data."""


class SerializationError(PrintForgeError):
    """Object materialization or output I/O failed during save."""
