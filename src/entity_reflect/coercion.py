"""
Coercion of raw strings (query parameters, path segments, form values) into
typed values.

Dispatch is a closed table keyed by target class, consulted after
``Optional`` and ``Annotated`` wrappers are removed. Width constraints from
``IntWidth`` / ``FloatWidth`` metadata apply to ``int`` / ``float`` targets.
Enumerations are matched structurally after the table, so an ``IntEnum``
target resolves by member name rather than as an ``int``.

Failure semantics:

- bool, integer, float, decimal, date and UUID targets raise ``ParseError``
- enum targets with an unknown member name return the raw string unchanged
  (degraded success) unless ``ReflectSettings.strict_enums`` is set; callers
  expecting an enum must check the result type
- unknown targets return the raw string unchanged
"""

from __future__ import annotations

import logging
import math
import re
import struct
import typing
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any
from uuid import UUID

from entity_reflect.config import ReflectSettings, get_settings
from entity_reflect.errors import ParseError
from entity_reflect.scalars import FloatWidth, IntWidth, split_annotated, unwrap_optional

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:NaN|Infinity)"
    r"|(?P<number>[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)[fFdD]?"
)
# leading and trailing characters up to U+0020 are ignored around floats
_CONTROL_AND_SPACE = "".join(chr(c) for c in range(0x21))
_UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

Parser = Callable[[str, tuple[Any, ...]], Any]


# =============================================================================
# Parsers
# =============================================================================


def _parse_bool(raw: str, meta: tuple[Any, ...]) -> bool:
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ParseError(raw, bool, "expected 'true' or 'false'")


def _width(meta: tuple[Any, ...], kind: type) -> Any:
    for item in meta:
        if isinstance(item, kind):
            return item
    return None


def _parse_int(raw: str, meta: tuple[Any, ...]) -> int:
    width = _width(meta, IntWidth)
    target = int if width is None else _annotated_target(int, meta)
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise ParseError(raw, target, "not an integer")
    value = int(raw)
    if width is not None and not width.min_value <= value <= width.max_value:
        raise ParseError(raw, target, f"out of range for {width.bits}-bit integer")
    return value


def _parse_float(raw: str, meta: tuple[Any, ...]) -> float:
    width = _width(meta, FloatWidth)
    target = float if width is None else _annotated_target(float, meta)
    match = _FLOAT_PATTERN.fullmatch(raw.strip(_CONTROL_AND_SPACE))
    if match is None:
        raise ParseError(raw, target, "not a number")
    # overflow gives +/-inf, underflow gives 0.0
    value = float(match.group("number") or match.group(0))

    if width is not None and width.bits == 32:
        try:
            value = struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            value = math.copysign(math.inf, value)
    return value


def _parse_decimal(raw: str, meta: tuple[Any, ...]) -> Decimal:
    if not _DECIMAL_PATTERN.fullmatch(raw):
        raise ParseError(raw, Decimal, "not a decimal number")
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ParseError(raw, Decimal, "not a decimal number") from exc


def _parse_epoch_millis(raw: str, target: type) -> datetime:
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise ParseError(raw, target, "expected epoch milliseconds")
    try:
        return _EPOCH + timedelta(milliseconds=int(raw))
    except OverflowError as exc:
        raise ParseError(raw, target, "out of range") from exc


def _parse_datetime(raw: str, meta: tuple[Any, ...]) -> datetime:
    return _parse_epoch_millis(raw, datetime)


def _parse_date(raw: str, meta: tuple[Any, ...]) -> date:
    return _parse_epoch_millis(raw, date).date()


def _parse_uuid(raw: str, meta: tuple[Any, ...]) -> UUID:
    if not _UUID_PATTERN.fullmatch(raw):
        raise ParseError(raw, UUID, "expected canonical 8-4-4-4-12 form")
    return UUID(raw)


def _annotated_target(base: type, meta: tuple[Any, ...]) -> Any:
    return Annotated[(base, *meta)]


_PARSERS: dict[type, Parser] = {
    bool: _parse_bool,
    int: _parse_int,
    float: _parse_float,
    Decimal: _parse_decimal,
    datetime: _parse_datetime,
    date: _parse_date,
    UUID: _parse_uuid,
}


def supported_targets() -> tuple[type, ...]:
    """Target classes with a parsing rule (enums are handled structurally)."""
    return tuple(_PARSERS)


# =============================================================================
# Public API
# =============================================================================


def coerce_enum(raw: str, target: type[Enum], settings: ReflectSettings | None = None) -> Any:
    """Look up an enum member by exact, case-sensitive name.

    Returns the raw string when no member matches, unless strict enums are
    enabled in settings.
    """
    try:
        return target[raw]
    except KeyError as exc:
        settings = settings or get_settings()
        if settings.strict_enums:
            raise ParseError(raw, target, "no member with this name") from exc
        logger.debug("No %s member named %r; returning raw string", target.__qualname__, raw)
        return raw


def coerce(raw: str, target_type: Any, *, settings: ReflectSettings | None = None) -> Any:
    """Convert ``raw`` to a value of ``target_type``.

    Args:
        raw: Input string.
        target_type: Target class or alias (``int``, ``Byte``, ``UUID``,
            ``Color | None``, ...), or None.
        settings: Overrides the environment settings.

    Returns:
        The typed value; ``raw`` unchanged when ``target_type`` is None,
        unsupported, or an enum without a matching member (non-strict).

    Raises:
        ParseError: ``raw`` is not valid for a supported target.
    """
    if target_type is None:
        return raw

    base, meta = split_annotated(unwrap_optional(target_type))
    base = unwrap_optional(base)
    if not isinstance(base, type) or typing.get_origin(base) is not None:
        return raw

    parser = _PARSERS.get(base)
    if parser is not None:
        return parser(raw, meta)

    if issubclass(base, Enum):
        return coerce_enum(raw, base, settings)

    return raw
