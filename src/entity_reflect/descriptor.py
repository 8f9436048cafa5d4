"""
Type descriptors: the reflection facade used by every other component.

All direct use of ``vars()``, ``__mro__``, annotation evaluation and
attribute access lives in this module. Members, accessors and markers are
read fresh on every call; nothing is cached.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import logging
import sys
import typing
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar

from entity_reflect.errors import make_reflection_error
from entity_reflect.markers import Marker, has_marker, markers_of

logger = logging.getLogger(__name__)


# =============================================================================
# Reflected Shapes
# =============================================================================


@dataclass(frozen=True)
class Member:
    """
    A data member declared on a class.

    Attributes:
        name: Attribute name (mangled for ``__private`` names)
        declaring_type: Class whose body declares the member
        type: Declared type, with markers removed from ``Annotated`` metadata
        static: True for ``ClassVar`` / ``InitVar`` declarations
        markers: Markers found in the ``Annotated`` metadata
    """

    name: str
    declaring_type: type
    type: Any
    static: bool = False
    markers: tuple[Marker, ...] = field(default_factory=tuple)

    def has_marker(self, kind: type[Marker]) -> bool:
        return has_marker(self.markers, kind)

    def read(self, instance: Any) -> Any:
        """Read the raw attribute value, bypassing properties of the same name."""
        try:
            namespace = vars(instance)
        except TypeError:
            namespace = {}
        if self.name in namespace:
            return namespace[self.name]
        return object.__getattribute__(instance, self.name)


@dataclass(frozen=True)
class Accessor:
    """
    A read accessor (``property`` or ``cached_property``) visible on a class.

    Attributes:
        name: Property name
        declaring_type: Class whose body defines the property
        fget: Getter function
        return_type: Getter return annotation, or None when not annotated
        markers: Markers attached to the getter
    """

    name: str
    declaring_type: type
    fget: Callable[[Any], Any]
    return_type: Any = None
    markers: tuple[Marker, ...] = field(default_factory=tuple)

    def has_marker(self, kind: type[Marker]) -> bool:
        return has_marker(self.markers, kind)

    def read(self, instance: Any) -> Any:
        """Invoke the getter on ``instance``."""
        return self.fget(instance)


# =============================================================================
# Annotation helpers
# =============================================================================


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _module_namespace(obj: Any) -> dict[str, Any]:
    module = sys.modules.get(getattr(obj, "__module__", None) or "")
    return dict(vars(module)) if module is not None else {}


def _evaluate(value: str, owner: type, module_ns: dict[str, Any]) -> Any:
    """Evaluate a string annotation.

    Module names shadow class attributes, as in ``typing.get_type_hints``,
    so ``date: date | None = None`` still refers to ``datetime.date``.
    """
    return eval(value, dict(vars(owner)), module_ns)  # noqa: S307


def _holds_markers(value: str) -> bool:
    return "Annotated" in value


def _is_static(annotation: Any) -> bool:
    if annotation is ClassVar or typing.get_origin(annotation) is ClassVar:
        return True
    return isinstance(annotation, dataclasses.InitVar) or annotation is dataclasses.InitVar


def _is_static_string(value: Any) -> bool:
    """Detect string ClassVar annotations without evaluating them, as dataclasses does."""
    if not isinstance(value, str):
        return False
    head = value.strip().split("[", 1)[0]
    return head in ("ClassVar", "typing.ClassVar")


def _split_markers(annotation: Any) -> tuple[Any, tuple[Marker, ...]]:
    """Separate markers from other ``Annotated`` metadata."""
    if typing.get_origin(annotation) is not Annotated:
        return annotation, ()
    base = annotation.__origin__
    markers = tuple(m for m in annotation.__metadata__ if isinstance(m, Marker))
    rest = tuple(m for m in annotation.__metadata__ if not isinstance(m, Marker))
    if rest:
        return Annotated[(base, *rest)], markers
    return base, markers


def _slot_names(cls: type) -> list[str]:
    slots = cls.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    names = []
    for name in slots:
        if name in ("__dict__", "__weakref__"):
            continue
        # private slot names are stored mangled, like annotations
        if name.startswith("__") and not name.endswith("__"):
            name = f"_{cls.__name__.lstrip('_')}{name}"
        names.append(name)
    return names


# =============================================================================
# Type Descriptor
# =============================================================================


class TypeDescriptor:
    """
    Reflective view of a class.

    The ancestor chain is the class MRO without ``object``; for single
    inheritance this is the class followed by its superclasses, immediate
    parent first.
    """

    __slots__ = ("cls",)

    def __init__(self, cls: type):
        if not isinstance(cls, type):
            raise TypeError(f"TypeDescriptor expects a class, got {type(cls).__name__}")
        self.cls = cls

    @classmethod
    def of(cls, target: Any) -> TypeDescriptor | None:
        """Describe a class, or the class of an instance. ``None`` gives ``None``."""
        if target is None:
            return None
        if isinstance(target, type):
            return cls(target)
        return cls(type(target))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TypeDescriptor) and other.cls is self.cls

    def __hash__(self) -> int:
        return hash(self.cls)

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.cls.__qualname__})"

    @property
    def name(self) -> str:
        return self.cls.__qualname__

    def ancestors(self) -> list[TypeDescriptor]:
        """This class followed by its ancestors, most-derived first."""
        return [TypeDescriptor(k) for k in self.cls.__mro__ if k is not object]

    def superclass(self) -> TypeDescriptor | None:
        chain = self.ancestors()
        return chain[1] if len(chain) > 1 else None

    def markers(self) -> tuple[Marker, ...]:
        """Markers attached to this class itself (not its ancestors)."""
        return markers_of(self.cls)

    def declared_members(self) -> list[Member]:
        """Members declared in this class's own body, in declaration order."""
        try:
            raw = inspect.get_annotations(self.cls)
        except Exception as exc:
            raise make_reflection_error(self.cls, exc) from exc
        module_ns = _module_namespace(self.cls)

        members: list[Member] = []
        for name, value in raw.items():
            if _is_dunder(name):
                continue
            if _is_static_string(value):
                members.append(Member(name=name, declaring_type=self.cls, type=value, static=True))
                continue

            annotation = value
            if isinstance(value, str):
                try:
                    annotation = _evaluate(value, self.cls, module_ns)
                except Exception as exc:
                    # an unresolved Annotated[...] could be hiding markers
                    if _holds_markers(value):
                        raise make_reflection_error(self.cls, exc) from exc
                    logger.debug(
                        "Unresolved annotation %r on %s.%s: %s",
                        value,
                        self.cls.__qualname__,
                        name,
                        exc,
                    )
            declared, markers = _split_markers(annotation)
            members.append(
                Member(
                    name=name,
                    declaring_type=self.cls,
                    type=declared,
                    static=_is_static(declared),
                    markers=markers,
                )
            )

        for name in _slot_names(self.cls):
            if name not in raw:
                members.append(Member(name=name, declaring_type=self.cls, type=Any))
        return members

    def accessors(self) -> list[Accessor]:
        """
        Read accessors visible on this class.

        The most-derived definition of a name wins: a subclass attribute of
        any kind hides an ancestor property of the same name. Write-only
        properties are skipped.
        """
        seen: set[str] = set()
        found: list[Accessor] = []
        for klass in self.cls.__mro__:
            if klass is object:
                continue
            for name, attr in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if _is_dunder(name):
                    continue

                if isinstance(attr, property):
                    fget = attr.fget
                elif isinstance(attr, functools.cached_property):
                    fget = attr.func
                else:
                    continue
                if fget is None:
                    continue

                found.append(
                    Accessor(
                        name=name,
                        declaring_type=klass,
                        fget=fget,
                        return_type=self._return_type(fget, klass),
                        markers=markers_of(fget),
                    )
                )
        return found

    @staticmethod
    def _return_type(fget: Callable[..., Any], owner: type) -> Any:
        """Getter return annotation, or None. Unresolvable names are kept as strings."""
        name = getattr(fget, "__name__", "?")
        try:
            annotations = getattr(fget, "__annotations__", None) or {}
        except NameError as exc:
            logger.debug("Unresolved annotations on %s.%s: %s", owner.__qualname__, name, exc)
            return None
        if "return" not in annotations:
            return None

        value = annotations["return"]
        if isinstance(value, str):
            try:
                value = _evaluate(value, owner, getattr(fget, "__globals__", None) or {})
            except Exception as exc:
                logger.debug(
                    "Unresolved return annotation %r on %s.%s: %s",
                    value,
                    owner.__qualname__,
                    name,
                    exc,
                )
                return value
        declared, _ = _split_markers(value)
        return declared
