"""Sort orders and their normalization into total orders.

A cursor only identifies a single position in a result set if the order
it was taken under is *total*: no two records may share the same sort-key
tuple. Callers usually order by something human (name, date) that is not
unique, so before paginating the order is extended with the primary key
columns it is missing.

Example:
    order = parse_order([("firstName", "ASC"), ("lastName", "ASC")])
    normalized = normalize_order(order, [[KeyColumn("id", "id")]])
    # firstName ASC, lastName ASC, id ASC
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, NamedTuple

from cursor_connection.core.exceptions import InvalidPaginationArguments, InvalidSchema

# $associationName.associationField$
ASSOCIATION_REFERENCE_PATTERN = re.compile(r"^\$([^.]+)\.(.+)\$$")


class Direction(StrEnum):
    """Sort direction of a single order field."""

    ASC = "ASC"
    DESC = "DESC"

    def reversed(self) -> Direction:
        return Direction.DESC if self is Direction.ASC else Direction.ASC

    @classmethod
    def parse(cls, value: Any) -> Direction:
        """Parse a direction from a Direction or a case-insensitive string.

        Raises:
            InvalidPaginationArguments: If the value is not ASC or DESC
        """
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        msg = f"Sort direction must be 'ASC' or 'DESC', got {value!r}"
        raise InvalidPaginationArguments(msg, argument="order")


@dataclass(frozen=True, slots=True)
class PlainField:
    """A column of the paginated model itself."""

    name: str

    @property
    def key(self) -> str:
        """Name under which a cursor stores this field's value."""
        return self.name

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class AssociationField:
    """A column reached through a relationship, written ``$relation.field$``."""

    relation: str
    field: str

    @property
    def key(self) -> str:
        """Name under which a cursor stores this field's value."""
        return f"${self.relation}.{self.field}$"

    def __str__(self) -> str:
        return self.key


type FieldReference = PlainField | AssociationField


class KeyColumn(NamedTuple):
    """A model attribute that is part of a unique key, with its storage column name."""

    attribute: str
    column: str


type UniqueKeyGroup = Sequence[KeyColumn]


@dataclass(frozen=True, slots=True)
class OrderItem:
    """One ``(field, direction)`` entry of a sort order."""

    field: FieldReference
    direction: Direction = Direction.ASC

    def reversed(self) -> OrderItem:
        return OrderItem(self.field, self.direction.reversed())

    def __str__(self) -> str:
        return f"{self.field} {self.direction}"


type OrderSpec = tuple[OrderItem, ...]


def match_association_reference(reference: str) -> tuple[str, str] | None:
    """Split a ``$associationName.associationField$`` reference.

    Args:
        reference: The possible association reference string

    Returns:
        ``(association_name, association_field)`` if the string is an
        association reference, None otherwise.

    Example:
        >>> match_association_reference("$author.name$")
        ('author', 'name')
        >>> match_association_reference("name") is None
        True
    """
    match = ASSOCIATION_REFERENCE_PATTERN.match(reference)
    if not match:
        return None
    return match.group(1), match.group(2)


def parse_field_reference(
    reference: str | PlainField | AssociationField,
    resolve: Callable[[str], tuple[str, str] | None] = match_association_reference,
) -> FieldReference:
    """Turn a field name or ``$relation.field$`` string into a FieldReference."""
    if isinstance(reference, PlainField | AssociationField):
        return reference
    if not isinstance(reference, str) or not reference:
        msg = f"Order fields must be non-empty strings, got {reference!r}"
        raise InvalidPaginationArguments(msg, argument="order")

    association = resolve(reference)
    if association is None:
        return PlainField(reference)
    return AssociationField(*association)


def parse_order(
    order: Sequence[OrderItem | Sequence[Any]],
    *,
    resolve: Callable[[str], tuple[str, str] | None] = match_association_reference,
) -> OrderSpec:
    """Capture a caller-supplied order as an immutable OrderSpec.

    Accepts OrderItem instances or ``(field, direction)`` pairs, where
    ``field`` is a name or a ``$relation.field$`` reference.

    Raises:
        InvalidPaginationArguments: If the order is empty or malformed
    """
    if isinstance(order, str | bytes) or not isinstance(order, Sequence) or not order:
        msg = "'order' must be specified (and a non-empty sequence)"
        raise InvalidPaginationArguments(msg, argument="order")

    items: list[OrderItem] = []
    for entry in order:
        if isinstance(entry, OrderItem):
            items.append(entry)
            continue
        if isinstance(entry, str | bytes) or not isinstance(entry, Sequence) or len(entry) != 2:
            msg = f"Order entries must be (field, direction) pairs, got {entry!r}"
            raise InvalidPaginationArguments(msg, argument="order")
        field, direction = entry
        items.append(OrderItem(parse_field_reference(field, resolve), Direction.parse(direction)))

    return tuple(items)


def reverse_order(order: OrderSpec) -> OrderSpec:
    """Flip every field's direction (ASC <-> DESC), keeping field precedence."""
    return tuple(item.reversed() for item in order)


def cursor_keys(order: OrderSpec) -> list[str]:
    """Cursor keys a cursor must provide for this order, in order."""
    return [item.field.key for item in order]


def order_has_field(order: OrderSpec, attribute: str) -> bool:
    return any(
        isinstance(item.field, PlainField) and item.field.name == attribute for item in order
    )


def order_covers_group(order: OrderSpec, group: UniqueKeyGroup) -> bool:
    """Whether every attribute of a non-empty unique group appears in the order."""
    if not group:
        return False
    return all(order_has_field(order, key.attribute) for key in group)


def order_includes_unique(order: OrderSpec, unique_groups: Sequence[UniqueKeyGroup]) -> bool:
    return any(order_covers_group(order, group) for group in unique_groups)


def normalize_order(
    order: OrderSpec,
    unique_groups: Sequence[UniqueKeyGroup],
    *,
    model_name: str | None = None,
) -> OrderSpec:
    """Extend an order so that it is total over the model's records.

    If the order already contains every attribute of one unique group it is
    returned unchanged. Otherwise the primary key attributes (the first
    group) that the order lacks are appended in ascending direction, sorted
    by storage column name so that the result does not depend on attribute
    declaration order.

    Args:
        order: Caller order
        unique_groups: Unique key groups, primary key first
        model_name: Used in error messages only

    Returns:
        The normalized order

    Raises:
        InvalidSchema: If there is no primary key and no unique group
            already covered by the order
    """
    if order_includes_unique(order, unique_groups):
        return order

    primary_key = list(unique_groups[0]) if unique_groups else []
    if not primary_key:
        msg = "Cannot build a total order: the model has no primary key or covering unique key"
        raise InvalidSchema(msg, model_name=model_name)

    normalized = list(order)
    for key in sorted(primary_key, key=lambda key: key.column):
        if not order_has_field(order, key.attribute):
            normalized.append(OrderItem(PlainField(key.attribute), Direction.ASC))

    return tuple(normalized)


def describe_order(order: OrderSpec) -> str:
    """Human-readable rendering used in log messages."""
    return ", ".join(str(item) for item in order)


__all__ = [
    "ASSOCIATION_REFERENCE_PATTERN",
    "AssociationField",
    "Direction",
    "FieldReference",
    "KeyColumn",
    "OrderItem",
    "OrderSpec",
    "PlainField",
    "UniqueKeyGroup",
    "cursor_keys",
    "describe_order",
    "match_association_reference",
    "normalize_order",
    "order_covers_group",
    "order_has_field",
    "order_includes_unique",
    "parse_field_reference",
    "parse_order",
    "reverse_order",
]
