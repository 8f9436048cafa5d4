"""
Member enumeration and class-level annotation lookup across ancestor chains.
"""

from __future__ import annotations

from typing import TypeVar

from entity_reflect.descriptor import Member, TypeDescriptor
from entity_reflect.markers import Marker

M = TypeVar("M", bound=Marker)


def enumerate_members(tp: type | None) -> list[Member]:
    """Collect the non-static data members of ``tp`` and all its ancestors.

    The class's own members come first, then each ancestor's, accumulated
    outward. Declaration order is kept within a class. A member re-declared
    in a subclass is listed once for each declaring class.

    Args:
        tp: Class to inspect, or None.

    Returns:
        Members, most-derived first. Empty for None.
    """
    descriptor = TypeDescriptor.of(tp)
    if descriptor is None:
        return []

    members: list[Member] = []
    for klass in descriptor.ancestors():
        members.extend(klass.declared_members())
    return [m for m in members if not m.static]


def find_annotation(tp: type | None, kind: type[M] | None) -> M | None:
    """Return the ``kind`` marker of the most-derived class in the chain declaring one.

    Args:
        tp: Class to inspect, or None.
        kind: Marker class to look for, or None.

    Returns:
        The marker instance, or None when absent from the whole chain.
    """
    if kind is None:
        return None
    descriptor = TypeDescriptor.of(tp)
    if descriptor is None:
        return None

    for klass in descriptor.ancestors():
        for marker in klass.markers():
            if isinstance(marker, kind):
                return marker
    return None


def find_annotations(tp: type | None, kind: type[M] | None) -> list[M]:
    """Every ``kind`` marker in the chain, most-derived class first."""
    if kind is None:
        return []
    descriptor = TypeDescriptor.of(tp)
    if descriptor is None:
        return []
    return [m for klass in descriptor.ancestors() for m in klass.markers() if isinstance(m, kind)]

