"""Filter predicates and the cursor seek condition.

Predicates are a small immutable tree (Compare, And, Or, plus Clause for a
backend-native expression the caller already built). Keeping them as data
rather than SQL means the seek condition can be tested on its own and
rendered by any data source; the SQLAlchemy renderer lives in
``cursor_connection.core.database.filters``.

The seek condition is built from the inside out. For
ORDER BY firstName ASC, lastName ASC, id ASC and ``after`` cursor c:

    firstName > c.firstName
      OR (firstName = c.firstName AND (lastName > c.lastName
        OR (lastName = c.lastName AND id > c.id)))
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from cursor_connection.core.exceptions import MalformedCursor
from cursor_connection.core.pagination.ordering import (
    Direction,
    FieldReference,
    OrderSpec,
    parse_field_reference,
)


class Operator(StrEnum):
    EQ = "="
    GT = ">"
    LT = "<"


class CursorKind(StrEnum):
    """Which side of the cursor a seek condition keeps."""

    AFTER = "after"
    BEFORE = "before"


# strict comparison per (cursor side, field direction)
CURSOR_OPERATORS: dict[CursorKind, dict[Direction, Operator]] = {
    CursorKind.AFTER: {Direction.ASC: Operator.GT, Direction.DESC: Operator.LT},
    CursorKind.BEFORE: {Direction.ASC: Operator.LT, Direction.DESC: Operator.GT},
}


@dataclass(frozen=True, slots=True)
class Compare:
    """``field <op> value``."""

    field: FieldReference
    operator: Operator
    value: Any

    def __str__(self) -> str:
        return f"{self.field} {self.operator} {self.value!r}"


@dataclass(frozen=True, slots=True)
class And:
    operands: tuple[Predicate, ...]

    def __str__(self) -> str:
        return "(" + " AND ".join(str(operand) for operand in self.operands) + ")"


@dataclass(frozen=True, slots=True)
class Or:
    operands: tuple[Predicate, ...]

    def __str__(self) -> str:
        return "(" + " OR ".join(str(operand) for operand in self.operands) + ")"


@dataclass(frozen=True, slots=True, eq=False)
class Clause:
    """Opaque backend-native expression (e.g. a SQLAlchemy column expression).

    Passed through to the data source untouched.
    """

    expression: Any

    def __str__(self) -> str:
        return str(self.expression)


type Predicate = Compare | And | Or | Clause


def build_cursor_predicate(
    order: OrderSpec,
    cursor: Mapping[str, Any],
    kind: CursorKind,
) -> Predicate:
    """Build the condition "strictly after/before ``cursor`` under ``order``".

    Args:
        order: Normalized (total) order
        cursor: Mapping from field key to the cursor record's value
        kind: CursorKind.AFTER or CursorKind.BEFORE

    Returns:
        Predicate tree equivalent to a lexicographic tuple comparison

    Raises:
        MalformedCursor: If the cursor is not a mapping or lacks a value
            for one of the order's fields
    """
    if not isinstance(cursor, Mapping):
        msg = f"{kind.value!r} cursor must be a mapping of field to value, got {type(cursor).__name__}"
        raise MalformedCursor(msg)

    operators = CURSOR_OPERATORS[kind]
    *preceding, last = order

    predicate: Predicate = Compare(
        last.field, operators[last.direction], _cursor_value(cursor, last.field)
    )

    for item in reversed(preceding):
        value = _cursor_value(cursor, item.field)
        predicate = Or(
            (
                Compare(item.field, operators[item.direction], value),
                And((Compare(item.field, Operator.EQ, value), predicate)),
            )
        )

    return predicate


def _cursor_value(cursor: Mapping[str, Any], field: FieldReference) -> Any:
    if field.key not in cursor:
        raise MalformedCursor(f"cursor is missing key {field.key}", missing_key=field.key)
    return cursor[field.key]


def referenced_fields(predicate: Predicate | None) -> Iterator[FieldReference]:
    """Yield every field compared anywhere in the tree (Clause operands are opaque)."""
    match predicate:
        case Compare(field=field):
            yield field
        case And(operands=operands) | Or(operands=operands):
            for operand in operands:
                yield from referenced_fields(operand)


def conjoin(*predicates: Predicate | None) -> Predicate | None:
    """AND together the given predicates, skipping None.

    A single predicate is returned as-is rather than wrapped.
    """
    operands = tuple(predicate for predicate in predicates if predicate is not None)
    if not operands:
        return None
    if len(operands) == 1:
        return operands[0]
    return And(operands)


def as_predicate(value: Any) -> Predicate | None:
    """Coerce a caller filter into a Predicate.

    Accepts None, a Predicate, a ``{field: value}`` mapping (equality on
    every field, combined with AND), or any backend-native expression,
    which is wrapped in a Clause.
    """
    if value is None:
        return None
    if isinstance(value, Compare | And | Or | Clause):
        return value
    if isinstance(value, Mapping):
        return conjoin(
            *(
                Compare(parse_field_reference(field), Operator.EQ, field_value)
                for field, field_value in value.items()
            )
        )
    return Clause(value)


__all__ = [
    "And",
    "Clause",
    "Compare",
    "CURSOR_OPERATORS",
    "CursorKind",
    "Operator",
    "Or",
    "Predicate",
    "as_predicate",
    "build_cursor_predicate",
    "conjoin",
    "referenced_fields",
]
