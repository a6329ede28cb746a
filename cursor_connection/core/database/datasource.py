"""SQLAlchemy implementation of the pagination DataSource.

    source = SqlAlchemyDataSource(User, session)
    result = await find_by_cursor(source, order=[("created_at", "DESC")], first=20)

Pass an ``async_sessionmaker`` instead of a session to give every fetch its
own session; the lazily-run page-info probes can then be awaited
concurrently (one ``AsyncSession`` must never be used from two tasks at once).

A custom base ``statement`` replaces ``select(model)`` when the default
query is not enough (extra joins, filters, eager loading). The seek
condition, ORDER BY and LIMIT are applied on top of it; any ORDER BY or
LIMIT already on the statement is replaced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import RelationshipProperty

from cursor_connection.core.database.filters import SeekFilter
from cursor_connection.core.database.inspection import (
    get_primary_key_columns,
    get_unique_key_groups,
)
from cursor_connection.core.exceptions import InvalidPaginationArguments
from cursor_connection.core.pagination.ordering import (
    AssociationField,
    match_association_reference,
)
from cursor_connection.core.pagination.predicates import referenced_fields
from cursor_connection.core.settings import get_pagination_settings
from cursor_connection.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlalchemy.orm import InstrumentedAttribute

    from cursor_connection.core.pagination.datasource import FetchQuery
    from cursor_connection.core.pagination.ordering import FieldReference, KeyColumn

# pass-through options understood by fetch()
FETCH_OPTIONS = frozenset({"loader_options", "execution_options"})


class SqlAlchemyDataSource[T]:
    """Paginate an ORM model through an async SQLAlchemy session.

    Pass-through options (``find_by_cursor(..., options=...)``):
        loader_options: Sequence of loader options, e.g. ``[selectinload(User.posts)]``
        execution_options: Mapping given to ``Select.execution_options``

    Attributes:
        model: Mapped class being paginated
        statement: Base statement (defaults to ``select(model)``)
        join_associations: Whether relationships named by ``$relation.field$``
            references are joined automatically. Disable when ``statement``
            already joins them.
    """

    def __init__(
        self,
        model: type[T],
        session: AsyncSession | async_sessionmaker[AsyncSession],
        *,
        statement: Select[Any] | None = None,
        join_associations: bool | None = None,
    ) -> None:
        self.model = model
        self.statement = statement
        if join_associations is None:
            join_associations = get_pagination_settings().join_associations
        self.join_associations = join_associations
        self._session = session
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    def get_primary_key_fields(self) -> list[KeyColumn]:
        return get_primary_key_columns(self.model)

    def get_unique_key_groups(self) -> list[list[KeyColumn]]:
        return get_unique_key_groups(self.model)

    def resolve_association_reference(self, reference: str) -> tuple[str, str] | None:
        return match_association_reference(reference)

    def resolve_column(self, field: FieldReference) -> InstrumentedAttribute[Any]:
        """Column attribute a field reference compares and sorts on.

        Raises:
            InvalidPaginationArguments: If the attribute or relationship
                does not exist on the model
        """
        if isinstance(field, AssociationField):
            target = self._relationship(field.relation).property.mapper.class_
            return self._attribute(target, field.field, field.key)
        return self._attribute(self.model, field.name, field.key)

    def _relationship(self, name: str) -> InstrumentedAttribute[Any]:
        attribute = getattr(self.model, name, None)
        if not isinstance(getattr(attribute, "property", None), RelationshipProperty):
            msg = f"{self.model.__name__} has no relationship {name!r}"
            raise InvalidPaginationArguments(msg, argument="order")
        return attribute

    @staticmethod
    def _attribute(owner: type[Any], name: str, key: str) -> InstrumentedAttribute[Any]:
        attribute = getattr(owner, name, None)
        if attribute is None or not hasattr(attribute, "asc"):
            msg = f"{owner.__name__} has no sortable attribute {name!r} (referenced as {key!r})"
            raise InvalidPaginationArguments(msg, argument="order")
        return attribute

    def build_statement(self, query: FetchQuery) -> Select[Any]:
        """Express one fetch as a SELECT statement (no I/O).

        Raises:
            InvalidPaginationArguments: On unknown pass-through options or
                unknown order/filter fields
        """
        unknown = set(query.options) - FETCH_OPTIONS
        if unknown:
            msg = f"Unsupported pass-through options: {', '.join(sorted(unknown))}"
            raise InvalidPaginationArguments(msg, argument="options")

        statement = self.statement if self.statement is not None else select(self.model)

        if self.join_associations:
            fields = [item.field for item in query.order]
            fields.extend(referenced_fields(query.filter))
            joined: list[str] = []
            for field in fields:
                if isinstance(field, AssociationField) and field.relation not in joined:
                    statement = statement.join(self._relationship(field.relation))
                    joined.append(field.relation)

        statement = SeekFilter(query, self.resolve_column).apply(statement)

        if loader_options := query.options.get("loader_options"):
            statement = statement.options(*loader_options)
        if execution_options := query.options.get("execution_options"):
            statement = statement.execution_options(**execution_options)

        return statement

    async def fetch(self, query: FetchQuery) -> Sequence[T]:
        statement = self.build_statement(query)
        self._lazy.debug(lambda: f"db.fetch: {statement}")

        if isinstance(self._session, AsyncSession):
            result = await self._session.execute(statement)
            rows = result.scalars().all()
        else:
            async with self._session() as session:
                result = await session.execute(statement)
                rows = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.fetch: {self.model.__name__}(limit={query.limit}) -> {len(rows)} rows"
        )
        return rows


__all__ = ["FETCH_OPTIONS", "SqlAlchemyDataSource"]
