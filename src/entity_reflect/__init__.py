"""
entity-reflect - metadata introspection for object-relational entities.

This package provides:
- Member enumeration and class marker lookup across ancestor chains
- Identifier lookup on members and property accessors
- Concrete collection classes for abstract collection types
- String coercion to typed values (integers, decimals, dates, UUIDs, enums)
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version

try:
    __version__ = _metadata_version("entity-reflect")
except PackageNotFoundError:
    __version__ = "0.0.0"

from entity_reflect.coercion import coerce, coerce_enum, supported_targets
from entity_reflect.collection_types import concrete_collection_for, is_collection_type
from entity_reflect.config import ReflectSettings, get_settings, load_settings
from entity_reflect.descriptor import Accessor, Member, TypeDescriptor
from entity_reflect.errors import (
    AccessError,
    EntityReflectError,
    InvocationError,
    NoIdentifierFound,
    ParseError,
    ReflectionError,
)
from entity_reflect.identifier import (
    accessor_for,
    locate_identifier_field,
    member_for,
    resolve_identifier_type,
    resolve_identifier_value,
)
from entity_reflect.markers import Column, Entity, Id, Marker, Table, Transient, annotate, identifier
from entity_reflect.members import enumerate_members, find_annotation, find_annotations
from entity_reflect.scalars import (
    BigDecimal,
    BigInteger,
    Byte,
    Double,
    Float,
    FloatWidth,
    Int,
    IntWidth,
    Long,
    Short,
)

__all__ = [
    "__version__",
    # Reflection
    "TypeDescriptor",
    "Member",
    "Accessor",
    "enumerate_members",
    "find_annotation",
    "find_annotations",
    # Markers
    "Marker",
    "Id",
    "Entity",
    "Table",
    "Column",
    "Transient",
    "annotate",
    "identifier",
    # Identifier
    "locate_identifier_field",
    "resolve_identifier_value",
    "resolve_identifier_type",
    "accessor_for",
    "member_for",
    # Collections
    "concrete_collection_for",
    "is_collection_type",
    # Coercion
    "coerce",
    "coerce_enum",
    "supported_targets",
    "Byte",
    "Short",
    "Int",
    "Long",
    "Float",
    "Double",
    "BigInteger",
    "BigDecimal",
    "IntWidth",
    "FloatWidth",
    # Config
    "ReflectSettings",
    "get_settings",
    "load_settings",
    # Errors
    "EntityReflectError",
    "ReflectionError",
    "NoIdentifierFound",
    "AccessError",
    "InvocationError",
    "ParseError",
]
