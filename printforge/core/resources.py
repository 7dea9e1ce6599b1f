# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Resource Pool and Reference Model

Resources (fonts, images, ICC profiles, vector objects) live in an arena
owned by a single document. Registration appends to the arena and hands back
a type-tagged Reference; drawing code only ever sees references and a
read-only resolver, never the arena itself.

Registration never looks at content: registering the same bytes twice
produces two resources, two references and two serialized objects.
"""

from __future__ import annotations

import itertools
import logging

from .error import ResourceError

logger = logging.getLogger(__name__)

# Resource kinds
FONT = 'font'
IMAGE = 'image'
ICC_PROFILE = 'icc_profile'
XOBJECT = 'xobject'

# Prefix of the name a resource gets inside content streams
_NAME_PREFIX = {FONT: 'F', IMAGE: 'Im', ICC_PROFILE: 'ICC', XOBJECT: 'X'}

_pool_ids = itertools.count(1)


class Resource:
    """Base class for anything that can be registered in a ResourcePool."""

    KIND = ''


class Reference(object):
    """
    Opaque handle to a registered resource.

    A reference is only meaningful to the pool that issued it. The subclass
    carries the resource kind, so a FontRef can never resolve to an image.
    """

    __slots__ = ('_pool_id', '_index')

    KIND = ''

    def __init__(self, pool_id: int, index: int) -> None:
        object.__setattr__(self, '_pool_id', pool_id)
        object.__setattr__(self, '_index', index)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def index(self) -> int:
        return self._index

    @property
    def pool_id(self) -> int:
        return self._pool_id

    @property
    def name(self) -> str:
        """Resource name used in content streams, e.g. 'F1'."""
        return f'{_NAME_PREFIX[self.KIND]}{self._index + 1}'

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, Reference) and self.KIND == other.KIND
                and self._pool_id == other._pool_id and self._index == other._index)

    def __hash__(self) -> int:
        return hash((self.KIND, self._pool_id, self._index))

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.name})'


class FontRef(Reference):
    __slots__ = ()
    KIND = FONT


class ImageRef(Reference):
    __slots__ = ()
    KIND = IMAGE


class IccProfileRef(Reference):
    __slots__ = ()
    KIND = ICC_PROFILE


class XObjectRef(Reference):
    __slots__ = ()
    KIND = XOBJECT


_REF_TYPES = {cls.KIND: cls for cls in (FontRef, ImageRef, IccProfileRef, XObjectRef)}


class ResourcePool:
    """Arena of resources for one document, in registration order."""

    def __init__(self) -> None:
        self.pool_id = next(_pool_ids)
        self._resources = []  # (Reference, Resource) in registration order
        self._by_ref = {}
        self._per_kind = {kind: 0 for kind in _REF_TYPES}

    def register(self, resource: Resource) -> Reference:
        """
        Add a resource and return a new reference to it.

        Args:
            resource: A Resource subclass instance

        Returns:
            Reference: Type-tagged handle, unique within this pool
        """
        kind = getattr(resource, 'KIND', None)
        if kind not in _REF_TYPES:
            raise ResourceError(f"cannot register {type(resource).__name__} as a resource")

        index = self._per_kind[kind]
        self._per_kind[kind] = index + 1
        ref = _REF_TYPES[kind](self.pool_id, index)
        self._resources.append((ref, resource))
        self._by_ref[ref] = resource
        logger.debug("registered %s as %s", type(resource).__name__, ref.name)
        return ref

    def resolve(self, ref: Reference, expected_kind: str | None = None) -> Resource:
        """
        Look up the resource behind a reference.

        Raises:
            ResourceError: not a reference, issued by another pool, never
                registered, or of a different kind than expected
        """
        if not isinstance(ref, Reference):
            raise ResourceError(f"expected a resource reference, got {ref!r}")
        if expected_kind is not None and ref.KIND != expected_kind:
            raise ResourceError(
                f"type mismatch: {ref!r} is a {ref.KIND} reference, expected {expected_kind}")
        if ref.pool_id != self.pool_id:
            raise ResourceError(f"{ref!r} belongs to a different document")
        resource = self._by_ref.get(ref)
        if resource is None:
            raise ResourceError(f"{ref!r} was never registered")
        return resource

    def items(self, kind: str | None = None) -> list:
        """(Reference, Resource) pairs in registration order."""
        return [(ref, res) for ref, res in self._resources
                if kind is None or ref.KIND == kind]

    def __len__(self) -> int:
        return len(self._resources)

    def resolver(self) -> ResourceResolver:
        return ResourceResolver(self)


class ResourceResolver:
    """Read-only view of a pool, handed to drawing code."""

    __slots__ = ('_pool',)

    def __init__(self, pool: ResourcePool) -> None:
        self._pool = pool

    def resolve(self, ref: Reference, expected_kind: str | None = None) -> Resource:
        return self._pool.resolve(ref, expected_kind)
