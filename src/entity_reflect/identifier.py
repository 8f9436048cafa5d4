"""
Identifier lookup for entity classes and instances.

The ``Id`` marker may sit on a data member or on a property getter. Getter
markers win, since a getter can compute the key (composite keys, derived
ids) in ways the raw member does not reflect. When the marker is on a
member, a property of the same name is still preferred over reading the
member directly.

Resolution order for ``resolve_identifier_value`` / ``resolve_identifier_type``:

1. first accessor whose getter carries ``Id``
2. member carrying ``Id`` (NoIdentifierFound if there is none), read through
   3. the accessor of the same name, if any
   4. the raw attribute otherwise
"""

from __future__ import annotations

import logging
from typing import Any

from entity_reflect.config import ReflectSettings, get_settings
from entity_reflect.descriptor import Accessor, Member, TypeDescriptor
from entity_reflect.errors import (
    make_access_error,
    make_invocation_error,
    make_no_identifier_error,
)
from entity_reflect.markers import Id
from entity_reflect.members import enumerate_members

logger = logging.getLogger(__name__)


def locate_identifier_field(
    tp: type | None, settings: ReflectSettings | None = None
) -> Member | None:
    """Return the first member, most-derived first, carrying the ``Id`` marker.

    More than one marked member is a mapping mistake; the first one wins and a
    warning is logged unless disabled in settings.
    """
    if tp is None:
        return None

    marked = [m for m in enumerate_members(tp) if m.has_marker(Id)]
    if not marked:
        return None

    if len(marked) > 1:
        settings = settings or get_settings()
        if settings.warn_on_duplicate_identifiers:
            candidates = [f"{m.declaring_type.__qualname__}.{m.name}" for m in marked]
            logger.warning(
                "Several members of %s carry the Id marker (%s); using %s",
                _name(tp),
                ", ".join(candidates),
                candidates[0],
                extra={"context": {"entity": _name(tp), "candidates": candidates}},
            )
    return marked[0]


def accessor_for(member: Member | None, tp: type | None) -> Accessor | None:
    """Return the accessor of ``tp`` named like ``member``, if any."""
    if member is None:
        return None
    descriptor = TypeDescriptor.of(tp)
    if descriptor is None:
        return None
    return _named(descriptor.accessors(), member.name)


def member_for(accessor: Accessor | None, tp: type | None) -> Member | None:
    """Return the first member of ``tp`` named like ``accessor``, if any."""
    if accessor is None or tp is None:
        return None
    for member in enumerate_members(tp):
        if member.name == accessor.name:
            return member
    return None


def resolve_identifier_value(instance: Any, settings: ReflectSettings | None = None) -> Any:
    """Return the identifier value of an entity instance.

    Raises:
        NoIdentifierFound: No accessor or member carries the ``Id`` marker.
        InvocationError: The identifier getter raised.
        AccessError: The identifier member could not be read directly.
    """
    descriptor = TypeDescriptor(type(instance))
    cls = descriptor.cls
    accessors = descriptor.accessors()

    for accessor in accessors:
        if accessor.has_marker(Id):
            logger.debug("Reading id of %s via marked accessor %s", descriptor.name, accessor.name)
            return _invoke(accessor, instance, cls)

    member = locate_identifier_field(cls, settings)
    if member is None:
        raise make_no_identifier_error(cls)

    accessor = _named(accessors, member.name)
    if accessor is not None:
        logger.debug("Reading id of %s via accessor %s", descriptor.name, accessor.name)
        return _invoke(accessor, instance, cls)

    logger.debug("Reading id of %s from member %s", descriptor.name, member.name)
    try:
        return member.read(instance)
    except AttributeError as exc:
        raise make_access_error(cls, member.name) from exc


def resolve_identifier_type(tp: type, settings: ReflectSettings | None = None) -> Any:
    """Return the declared identifier type of an entity class.

    The accessor return annotation is preferred; an unannotated accessor
    falls back to the declared member type.

    Raises:
        NoIdentifierFound: No accessor or member carries the ``Id`` marker.
    """
    descriptor = TypeDescriptor(tp if isinstance(tp, type) else type(tp))
    cls = descriptor.cls
    accessors = descriptor.accessors()

    for accessor in accessors:
        if accessor.has_marker(Id):
            if accessor.return_type is None:
                marked = member_for(accessor, cls)
                if marked is not None:
                    return marked.type
            return accessor.return_type

    member = locate_identifier_field(cls, settings)
    if member is None:
        raise make_no_identifier_error(cls)

    accessor = _named(accessors, member.name)
    if accessor is not None and accessor.return_type is not None:
        return accessor.return_type
    return member.type


# =============================================================================
# Helpers
# =============================================================================


def _name(tp: Any) -> str:
    return tp.__qualname__ if isinstance(tp, type) else type(tp).__qualname__


def _named(accessors: list[Accessor], name: str) -> Accessor | None:
    for accessor in accessors:
        if accessor.name == name:
            return accessor
    return None


def _invoke(accessor: Accessor, instance: Any, cls: type) -> Any:
    try:
        return accessor.read(instance)
    except Exception as exc:
        raise make_invocation_error(cls, accessor.name, exc) from exc
