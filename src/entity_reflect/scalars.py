"""
Semantic scalar target types.

Python has a single ``int`` and a single ``float``; fixed-width targets are
expressed as ``Annotated`` aliases carrying a width constraint, which the
coercer honours::

    coerce("127", Byte)   # 127
    coerce("128", Byte)   # ParseError
"""

from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, Any, Union


@dataclass(frozen=True)
class IntWidth:
    """Two's-complement bit width of an integer target."""

    bits: int

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1))

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1


@dataclass(frozen=True)
class FloatWidth:
    """IEEE 754 bit width of a floating point target (32 or 64)."""

    bits: int


Byte = Annotated[int, IntWidth(8)]
Short = Annotated[int, IntWidth(16)]
Int = Annotated[int, IntWidth(32)]
Long = Annotated[int, IntWidth(64)]
Float = Annotated[float, FloatWidth(32)]
Double = float
BigInteger = int
BigDecimal = Decimal

_ALIAS_NAMES: dict[Any, str] = {
    Byte: "Byte",
    Short: "Short",
    Int: "Int",
    Long: "Long",
    Float: "Float",
}


def split_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *meta]`` into ``(T, meta)``; other types get ``()``."""
    if typing.get_origin(tp) is Annotated:
        return tp.__origin__, tp.__metadata__
    return tp, ()


def unwrap_optional(tp: Any) -> Any:
    """Reduce ``T | None`` / ``Optional[T]`` to ``T``; other types are returned as is."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def target_name(tp: Any) -> str:
    """Readable name for a target type, used in messages and CLI output."""
    if tp is None:
        return "None"
    try:
        alias = _ALIAS_NAMES.get(tp)
    except TypeError:
        alias = None
    if alias:
        return alias
    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)
