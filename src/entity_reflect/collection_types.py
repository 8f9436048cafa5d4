"""
Concrete collection classes for abstract collection types.

Used when materialising a to-many member declared with an abstract type
(``Sequence[Line]``, ``AbstractSet[Tag]``, ``Collection[Item]``).
"""

from __future__ import annotations

import collections.abc as cabc
import inspect
import typing
from typing import Any

# Text and binary types are sized iterables, not collections of entities.
_SCALAR_SEQUENCES = (str, bytes, bytearray, memoryview)


def _origin(tp: Any) -> Any:
    """Reduce ``list[int]`` / ``typing.Set[str]`` to their runtime class."""
    origin = typing.get_origin(tp)
    return origin if origin is not None else tp


def is_collection_type(tp: Any) -> bool:
    """True for collection classes; mappings, text and binary types excluded."""
    tp = _origin(tp)
    if not isinstance(tp, type):
        return False
    if not issubclass(tp, cabc.Collection):
        return False
    return not issubclass(tp, (cabc.Mapping, *_SCALAR_SEQUENCES))


def is_concrete(tp: type) -> bool:
    """True for instantiable classes: not abstract and not a ``collections.abc`` interface."""
    return not inspect.isabstract(tp) and tp.__module__ not in ("collections.abc", "typing")


def concrete_collection_for(tp: Any) -> type | None:
    """Return an instantiable collection class for ``tp``.

    Families are checked most specific first:

    - set family -> ``set``
    - list family (sequences) -> ``list``
    - any other collection -> ``set``

    Args:
        tp: Collection class or parameterised alias.

    Returns:
        ``tp`` itself when already concrete, a default class for abstract
        collection types, or None when ``tp`` is not a collection type.
    """
    if not is_collection_type(tp):
        return None
    tp = _origin(tp)

    if is_concrete(tp):
        return tp

    if issubclass(tp, cabc.Set):
        return set
    if issubclass(tp, cabc.Sequence):
        return list
    return set
