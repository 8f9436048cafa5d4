"""Tests for identifier lookup on members and accessors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import pytest
from pydantic import BaseModel

from entity_reflect import (
    Id,
    IntWidth,
    Short,
    accessor_for,
    coerce,
    identifier,
    locate_identifier_field,
    member_for,
    resolve_identifier_type,
    resolve_identifier_value,
)
from entity_reflect.errors import AccessError, InvocationError, NoIdentifierFound, ParseError

if TYPE_CHECKING:
    from decimal import Decimal as Money

ORDER_ID = UUID("6f1c2a8e-3b4d-4c5e-9f60-718293a4b5c6")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass
class Invoice:
    id: Annotated[int, Id()]
    number: str = ""


class Product:
    """Marker on the member, read through the property of the same name."""

    sku: Annotated[str, Id()]

    def __init__(self, sku: str):
        self._sku = sku

    @property
    def sku(self) -> str:
        return self._sku.upper()


class Shipment:
    """Marker on a getter that builds a composite key."""

    region: str
    number: int

    def __init__(self, region: str, number: int):
        self.region = region
        self.number = number

    @property
    @identifier
    def key(self) -> str:
        return f"{self.region}-{self.number}"


class Ledger:
    """Marker on both a member and a getter: the getter wins."""

    id: Annotated[int, Id()]

    def __init__(self, id: int):
        self.id = id

    @identifier
    @property
    def natural_key(self) -> str:
        return f"L{self.id}"


class BaseDocument:
    id: Annotated[UUID, Id()]


class Order(BaseDocument):
    label: str

    def __init__(self, id: UUID, label: str):
        self.id = id
        self.label = label


class Tag:
    name: str


class Exploding:
    @property
    @identifier
    def key(self) -> int:
        raise RuntimeError("boom")


@dataclass
class Holiday:
    id: Annotated[int, Id()]
    date: date | None = None


class Receipt:
    """Unrelated member typed with a name only known to type checkers."""

    id: Annotated[int, Id()]
    total: Money

    def __init__(self, id: int):
        self.id = id


class Unassigned:
    id: Annotated[int, Id()]


class Defaulted:
    id: Annotated[int, Id()] = 42


class Slotted:
    __slots__ = ("id",)
    id: Annotated[int, Id()]


class Private:
    __id: Annotated[int, Id()]

    def __init__(self, value: int):
        self.__id = value


class Legacy:
    ref: Annotated[UUID, Id()]

    def __init__(self, ref: UUID):
        self._ref = ref

    @property
    def ref(self):
        return self._ref


class Narrow:
    id: Annotated[int, IntWidth(16), Id()]


class DuplicateIds(BaseDocument):
    code: Annotated[str, Id()]


class Account(BaseModel):
    id: Annotated[int, Id()]
    email: str


class BaseKeyed:
    @property
    @identifier
    def key(self) -> str:
        return "base"


class OverriddenKey(BaseKeyed):
    code: Annotated[str, Id()]

    def __init__(self, code: str):
        self.code = code

    @property
    def key(self) -> str:
        return "child"


# ---------------------------------------------------------------------------
# locate_identifier_field
# ---------------------------------------------------------------------------


class TestLocateIdentifierField:
    def test_member_on_class(self):
        member = locate_identifier_field(Invoice)
        assert member is not None
        assert member.name == "id"
        assert member.declaring_type is Invoice

    def test_member_inherited_from_ancestor(self):
        member = locate_identifier_field(Order)
        assert member is not None
        assert member.declaring_type is BaseDocument

    def test_no_marker_gives_none(self):
        assert locate_identifier_field(Tag) is None
        assert locate_identifier_field(None) is None

    def test_accessor_marker_is_not_a_member(self):
        assert locate_identifier_field(Shipment) is None

    def test_most_derived_duplicate_wins_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="entity_reflect.identifier"):
            member = locate_identifier_field(DuplicateIds)
        assert member is not None
        assert member.name == "code"
        assert "Several members of DuplicateIds" in caplog.text
        assert caplog.records[-1].context == {
            "entity": "DuplicateIds",
            "candidates": ["DuplicateIds.code", "BaseDocument.id"],
        }

    def test_duplicate_warning_can_be_disabled(self, caplog, quiet_settings):
        with caplog.at_level(logging.WARNING, logger="entity_reflect.identifier"):
            member = locate_identifier_field(DuplicateIds, quiet_settings)
        assert member is not None
        assert member.name == "code"
        assert caplog.text == ""


# ---------------------------------------------------------------------------
# resolve_identifier_value
# ---------------------------------------------------------------------------


class TestResolveIdentifierValue:
    def test_member_read_directly_without_accessor(self):
        assert resolve_identifier_value(Invoice(id=7, number="INV-7")) == 7

    def test_member_read_through_accessor_of_same_name(self):
        assert resolve_identifier_value(Product("abc-1")) == "ABC-1"

    def test_marked_getter_is_invoked(self):
        assert resolve_identifier_value(Shipment("eu", 7)) == "eu-7"

    def test_marked_getter_wins_over_marked_member(self):
        assert resolve_identifier_value(Ledger(3)) == "L3"

    def test_inherited_member(self):
        assert resolve_identifier_value(Order(ORDER_ID, "first")) == ORDER_ID

    def test_no_identifier_raises(self):
        with pytest.raises(NoIdentifierFound) as exc_info:
            resolve_identifier_value(Tag())
        assert "Tag" in str(exc_info.value)

    def test_failing_getter_is_wrapped(self):
        with pytest.raises(InvocationError) as exc_info:
            resolve_identifier_value(Exploding())
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert "Exploding.key" in str(exc_info.value)

    def test_unassigned_member_raises_access_error(self):
        with pytest.raises(AccessError) as exc_info:
            resolve_identifier_value(Unassigned())
        assert isinstance(exc_info.value.__cause__, AttributeError)
        assert "Unassigned.id" in str(exc_info.value)

    def test_class_default_is_returned(self):
        assert resolve_identifier_value(Defaulted()) == 42

    def test_slot_member(self):
        entity = Slotted()
        entity.id = 5
        assert resolve_identifier_value(entity) == 5

    def test_unset_slot_raises_access_error(self):
        with pytest.raises(AccessError):
            resolve_identifier_value(Slotted())

    def test_private_member(self):
        assert resolve_identifier_value(Private(11)) == 11

    def test_pydantic_model(self):
        assert resolve_identifier_value(Account(id=9, email="a@example.com")) == 9

    def test_overriding_getter_drops_marker(self):
        assert resolve_identifier_value(OverriddenKey("c-1")) == "c-1"

    def test_member_named_like_its_type(self):
        assert resolve_identifier_value(Holiday(id=3, date=date(2024, 12, 25))) == 3

    def test_unresolvable_unrelated_member(self):
        assert resolve_identifier_value(Receipt(7)) == 7

    def test_repeated_calls_are_identical(self):
        shipment = Shipment("us", 1)
        assert resolve_identifier_value(shipment) == resolve_identifier_value(shipment)


# ---------------------------------------------------------------------------
# resolve_identifier_type
# ---------------------------------------------------------------------------


class TestResolveIdentifierType:
    def test_member_type(self):
        assert resolve_identifier_type(Invoice) is int

    def test_inherited_member_type(self):
        assert resolve_identifier_type(Order) is UUID

    def test_accessor_return_type_preferred(self):
        assert resolve_identifier_type(Product) is str

    def test_marked_getter_return_type(self):
        assert resolve_identifier_type(Shipment) is str
        assert resolve_identifier_type(Ledger) is str

    def test_unannotated_getter_falls_back_to_member_type(self):
        assert resolve_identifier_type(Legacy) is UUID

    def test_width_metadata_is_kept(self):
        id_type = resolve_identifier_type(Narrow)
        assert id_type == Short
        assert coerce("1200", id_type) == 1200
        with pytest.raises(ParseError):
            coerce("70000", id_type)

    def test_member_named_like_its_type(self):
        assert resolve_identifier_type(Holiday) is int
        assert resolve_identifier_type(Receipt) is int

    def test_no_identifier_raises(self):
        with pytest.raises(NoIdentifierFound):
            resolve_identifier_type(Tag)


# ---------------------------------------------------------------------------
# accessor_for / member_for
# ---------------------------------------------------------------------------


class TestNameMatching:
    def test_accessor_for_member(self):
        member = locate_identifier_field(Product)
        accessor = accessor_for(member, Product)
        assert accessor is not None
        assert accessor.name == "sku"
        assert accessor.return_type is str

    def test_accessor_for_member_without_property(self):
        assert accessor_for(locate_identifier_field(Invoice), Invoice) is None

    def test_member_for_accessor(self):
        accessor = accessor_for(locate_identifier_field(Legacy), Legacy)
        member = member_for(accessor, Legacy)
        assert member is not None
        assert member.type is UUID

    def test_none_inputs(self):
        assert accessor_for(None, Product) is None
        assert member_for(None, Product) is None
