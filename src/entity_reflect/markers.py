"""
Marker types attachable to entity classes, data members, and accessors.

Markers are the Python rendition of mapping annotations. They are attached:

- to classes and accessor getters with the ``annotate`` decorator::

    @annotate(Entity(), Table(name="orders"))
    class Order:
        ...

        @property
        @identifier
        def key(self) -> str: ...

- to data members inside ``typing.Annotated``::

    class Order:
        id: Annotated[int, Id()]

Class markers live in the class's own namespace and are never inherited
implicitly; ancestor lookup is the job of ``find_annotation``.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

MARKERS_ATTR = "__entity_markers__"

T = TypeVar("T")


# =============================================================================
# Marker Types
# =============================================================================


@dataclass(frozen=True)
class Marker:
    """Base class for all markers.

    Markers are plain frozen dataclasses so that they can sit inside the
    ``Annotated`` metadata of pydantic models without being mistaken for
    schema hooks.
    """


@dataclass(frozen=True)
class Id(Marker):
    """Marks the primary identifier of an entity."""


@dataclass(frozen=True)
class Entity(Marker):
    """
    Marks a class as a persistent entity.

    Attributes:
        name: Entity name (defaults to class name)
    """

    name: str | None = None


@dataclass(frozen=True)
class Table(Marker):
    """
    Table mapping for an entity class.

    Examples:
        - Table(name="orders")
        - Table(name="orders", schema_name="sales")
    """

    name: str
    schema_name: str | None = None


@dataclass(frozen=True)
class Column(Marker):
    """
    Column mapping for a data member or accessor.

    Attributes:
        name: Column name (defaults to member name)
        nullable: Column accepts NULL?
        unique: Values must be unique?
        length: Max length for string columns
    """

    name: str | None = None
    nullable: bool = True
    unique: bool = False
    length: int | None = None


@dataclass(frozen=True)
class Transient(Marker):
    """Marks a member that is not persisted."""


# =============================================================================
# Attaching
# =============================================================================


def annotate(*markers: Marker) -> Callable[[T], T]:
    """Attach markers to a class, a function, or a property's getter.

    Markers accumulate when ``annotate`` is applied more than once. For a
    ``property`` (or ``functools.cached_property``) the markers are stored
    on the wrapped getter, so ``annotate`` may sit above or below
    ``@property``.
    """
    for marker in markers:
        if not isinstance(marker, Marker):
            raise TypeError(f"annotate() expects Marker instances, got {type(marker).__name__}")

    def decorator(target: T) -> T:
        holder: Any = target
        if isinstance(target, property):
            holder = target.fget
        elif isinstance(target, functools.cached_property):
            holder = target.func
        if holder is None:
            raise TypeError("annotate() cannot decorate a property without a getter")

        if isinstance(holder, type):
            existing = holder.__dict__.get(MARKERS_ATTR, ())
        else:
            existing = getattr(holder, MARKERS_ATTR, ())
        setattr(holder, MARKERS_ATTR, tuple(existing) + markers)
        return target

    return decorator


def identifier(target: T) -> T:
    """Shorthand for ``annotate(Id())``."""
    return annotate(Id())(target)


def markers_of(holder: Any) -> tuple[Marker, ...]:
    """Return the markers attached directly to ``holder``.

    Classes only report markers from their own namespace.
    """
    if holder is None:
        return ()
    if isinstance(holder, type):
        return tuple(holder.__dict__.get(MARKERS_ATTR, ()))
    return tuple(getattr(holder, MARKERS_ATTR, ()))


def has_marker(markers: tuple[Marker, ...], kind: type[Marker]) -> bool:
    """True if any marker is an instance of ``kind``."""
    return any(isinstance(m, kind) for m in markers)
