"""SQLAlchemy statement filters for keyset pagination.

These work directly on ``Select`` statements without hiding the query:

    stmt = select(User)
    stmt = SeekFilter(query, resolve_column).apply(stmt)
    rows = (await session.execute(stmt)).scalars().all()

``render_predicate`` turns the pagination predicate tree into a SQLAlchemy
boolean expression. For ORDER BY created_at DESC, id ASC and an ``after``
cursor at (t1, id1) it renders:

    created_at < t1 OR (created_at = t1 AND id > id1)
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, and_, or_

from cursor_connection.core.exceptions import MalformedCursor
from cursor_connection.core.pagination.ordering import Direction
from cursor_connection.core.pagination.predicates import And, Clause, Compare, Operator, Or

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

    from cursor_connection.core.pagination.datasource import FetchQuery
    from cursor_connection.core.pagination.ordering import FieldReference
    from cursor_connection.core.pagination.predicates import Predicate

type ColumnResolver = Callable[[FieldReference], ColumnElement[Any]]

_COMPARATORS: dict[Operator, Callable[[Any, Any], Any]] = {
    Operator.EQ: operator.eq,
    Operator.GT: operator.gt,
    Operator.LT: operator.lt,
}


class StatementFilter(ABC):
    """Base class for statement filters.

    All filters implement `apply()` which modifies a SQLAlchemy statement.
    """

    @abstractmethod
    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply filter to statement.

        Args:
            statement: SQLAlchemy select statement

        Returns:
            Modified select statement
        """
        ...


def render_predicate(predicate: Predicate, resolve: ColumnResolver) -> ColumnElement[bool]:
    """Render a predicate tree as a SQLAlchemy boolean expression.

    Args:
        predicate: Tree to render
        resolve: Maps a FieldReference to the column expression to compare

    Returns:
        Expression usable in ``Select.where``

    Raises:
        MalformedCursor: If a strict comparison is against None (NULL
            has no position in a SQL ordering comparison)
    """
    match predicate:
        case Compare(field=field, operator=op, value=None) if op is not Operator.EQ:
            msg = f"cursor value for {field.key} is None and cannot be compared with {op}"
            raise MalformedCursor(msg)
        case Compare(field=field, operator=op, value=value):
            return _COMPARATORS[op](resolve(field), value)
        case And(operands=operands):
            return and_(*(render_predicate(operand, resolve) for operand in operands))
        case Or(operands=operands):
            return or_(*(render_predicate(operand, resolve) for operand in operands))
        case Clause(expression=expression):
            return expression
    msg = f"Cannot render {predicate!r} as a SQL expression"
    raise TypeError(msg)


class SeekFilter(StatementFilter):
    """Apply one pagination fetch to a statement.

    Adds:
    1. WHERE clause from the query filter (caller filter AND cursor condition)
    2. ORDER BY clause exactly as given in the query (replacing any existing one)
    3. LIMIT clause (the query limit already includes the +1 over-fetch)

    Attributes:
        query: The fetch to express
        resolve: Maps order/filter fields to column expressions
    """

    def __init__(self, query: FetchQuery, resolve: ColumnResolver) -> None:
        self.query = query
        self.resolve = resolve

    def apply(self, statement: Select[Any]) -> Select[Any]:
        if self.query.filter is not None:
            statement = statement.where(render_predicate(self.query.filter, self.resolve))

        statement = statement.order_by(None)
        for item in self.query.order:
            column = self.resolve(item.field)
            statement = statement.order_by(
                column.desc() if item.direction is Direction.DESC else column.asc()
            )

        return statement.limit(self.query.limit)


__all__ = [
    "ColumnResolver",
    "SeekFilter",
    "StatementFilter",
    "render_predicate",
]
