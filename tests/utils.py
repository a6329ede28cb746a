"""Test utilities and helper functions.

Usage:
    from tests.utils import FakeDataSource, PEOPLE

    source = FakeDataSource(PEOPLE)
    result = await find_by_cursor(source, order=[("firstName", "ASC")], first=2)
    assert source.queries[0].limit == 3
"""

from __future__ import annotations

from datetime import date
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from cursor_connection.core.pagination.ordering import (
    AssociationField,
    Direction,
    KeyColumn,
    match_association_reference,
)
from cursor_connection.core.pagination.predicates import And, Clause, Compare, Operator, Or

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from cursor_connection.core.pagination.datasource import FetchQuery
    from cursor_connection.core.pagination.ordering import FieldReference, OrderSpec
    from cursor_connection.core.pagination.predicates import Predicate


# ============================================================================
# Sample data
# ============================================================================

# Ordered by (firstName, lastName, id): 5, 4, 3, 2, 1, 6
PEOPLE: list[dict[str, Any]] = [
    {"id": 5, "firstName": "Alan", "lastName": "LastName", "birthDate": date(2000, 1, 1)},
    {"id": 4, "firstName": "Bernard", "lastName": "LastName", "birthDate": date(1970, 1, 1)},
    {"id": 3, "firstName": "Cedric", "lastName": "Anderson", "birthDate": date(1980, 1, 1)},
    {"id": 2, "firstName": "Cedric", "lastName": "Brown", "birthDate": date(1960, 1, 1)},
    {"id": 6, "firstName": "Dimitri", "lastName": "LastName", "birthDate": date(1990, 1, 1)},
    {"id": 1, "firstName": "Dimitri", "lastName": "LastName", "birthDate": date(2010, 1, 1)},
]

NAME_ORDER = [("firstName", "ASC"), ("lastName", "ASC")]


def ids(nodes: Iterable[Any]) -> list[int]:
    """Primary keys of dict records or ORM instances, in order."""
    return [node["id"] if isinstance(node, dict) else node.id for node in nodes]


# ============================================================================
# In-memory DataSource
# ============================================================================


def read_field(record: dict[str, Any], field: FieldReference) -> Any:
    if isinstance(field, AssociationField):
        return record[field.relation][field.field]
    return record[field.name]


def evaluate(predicate: Predicate, record: dict[str, Any]) -> bool:
    """Evaluate a predicate tree against a dict record.

    Clause expressions are expected to be callables taking the record.
    """
    match predicate:
        case Compare(field=field, operator=Operator.EQ, value=value):
            return read_field(record, field) == value
        case Compare(field=field, operator=Operator.GT, value=value):
            return read_field(record, field) > value
        case Compare(field=field, operator=Operator.LT, value=value):
            return read_field(record, field) < value
        case And(operands=operands):
            return all(evaluate(operand, record) for operand in operands)
        case Or(operands=operands):
            return any(evaluate(operand, record) for operand in operands)
        case Clause(expression=expression):
            return bool(expression(record))
    raise TypeError(predicate)


def sort_records(records: Iterable[dict[str, Any]], order: OrderSpec) -> list[dict[str, Any]]:
    def compare(left: dict[str, Any], right: dict[str, Any]) -> int:
        for item in order:
            a, b = read_field(left, item.field), read_field(right, item.field)
            if a == b:
                continue
            result = -1 if a < b else 1
            return -result if item.direction is Direction.DESC else result
        return 0

    return sorted(records, key=cmp_to_key(compare))


class FakeDataSource:
    """DataSource over a list of dicts that records every query it runs."""

    def __init__(
        self,
        records: Iterable[dict[str, Any]],
        *,
        primary_key: Sequence[KeyColumn] = (KeyColumn("id", "id"),),
        unique_groups: Sequence[Sequence[KeyColumn]] | None = None,
    ) -> None:
        self.records = list(records)
        self.primary_key = list(primary_key)
        self.unique_groups = (
            [list(group) for group in unique_groups]
            if unique_groups is not None
            else [self.primary_key]
        )
        self.queries: list[FetchQuery] = []

    async def fetch(self, query: FetchQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        matching = [
            record
            for record in self.records
            if query.filter is None or evaluate(query.filter, record)
        ]
        return sort_records(matching, query.order)[: query.limit]

    def get_primary_key_fields(self) -> list[KeyColumn]:
        return self.primary_key

    def get_unique_key_groups(self) -> list[list[KeyColumn]]:
        return self.unique_groups

    def resolve_association_reference(self, reference: str) -> tuple[str, str] | None:
        return match_association_reference(reference)
