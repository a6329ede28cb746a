"""Minimal generic repository for cursor-paginated reads.

Session passing stays explicit. For anything beyond pagination, use the
session directly; this is a convenience, not a cage.

Example:
    from cursor_connection.core.database import BaseRepository

    class UserRepository(BaseRepository[User]):
        async def list_active(self, session: AsyncSession, **page: Any):
            stmt = select(User).where(User.is_active == True)
            return await self.find_by_cursor(session, statement=stmt, **page)

    user_repo = UserRepository(User)
    result = await user_repo.find_by_cursor(
        session, order=[("created_at", "DESC")], first=50, after=cursor
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cursor_connection.core.database.datasource import SqlAlchemyDataSource
from cursor_connection.core.pagination import find_by_cursor
from cursor_connection.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from cursor_connection.core.pagination import ConnectionResult, OrderItem
    from cursor_connection.core.settings import PaginationSettings


class BaseRepository[T]:
    """Generic repository exposing connection-style cursor pagination.

    Provides:
        - find_by_cursor(session, order=..., first/last=..., after/before=...)
          -> ConnectionResult[T]
        - data_source(session) -> SqlAlchemyDataSource[T]
    """

    __slots__ = ("model", "_lazy")

    def __init__(self, model: type[T]) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., User, Post)
        """
        self.model = model
        # DEBUG only, evaluated lazily
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    def data_source(
        self,
        session: AsyncSession | async_sessionmaker[AsyncSession],
        *,
        statement: Select[Any] | None = None,
        join_associations: bool | None = None,
    ) -> SqlAlchemyDataSource[T]:
        """Data source over this repository's model."""
        return SqlAlchemyDataSource(
            self.model,
            session,
            statement=statement,
            join_associations=join_associations,
        )

    async def find_by_cursor(
        self,
        session: AsyncSession | async_sessionmaker[AsyncSession],
        *,
        order: Sequence[OrderItem | Sequence[Any]],
        first: int | None = None,
        last: int | None = None,
        after: Mapping[str, Any] | None = None,
        before: Mapping[str, Any] | None = None,
        filter: Any = None,  # noqa: A002
        statement: Select[Any] | None = None,
        options: Mapping[str, Any] | None = None,
        settings: PaginationSettings | None = None,
    ) -> ConnectionResult[T]:
        """Execute a cursor-paginated query.

        Args:
            session: Database session (or session factory)
            order: ``(attribute, "ASC"|"DESC")`` pairs; ``$relation.field$``
                references sort on a related model's column
            first: Number of items for forward pagination
            last: Number of items for backward pagination
            after: Cursor for forward pagination (fetch items after this)
            before: Cursor for backward pagination (fetch items before this)
            filter: Extra condition AND-ed with the cursor condition
                (SQLAlchemy expression, Predicate or ``{field: value}``)
            statement: Base statement instead of ``select(model)``
            options: Pass-through options (loader_options, execution_options)
            settings: Overrides the cached PaginationSettings (page size cap
                and association joins)

        Returns:
            ConnectionResult[T] with nodes, cursor_keys and page-info coroutines

        Example:
            result = await repo.find_by_cursor(
                session,
                order=[("created_at", "DESC")],
                first=50,
                after=cursor_from_request,
                filter=User.is_active == True,
            )
            if await result.has_next_page():
                next_cursor = result.cursor_for(result.nodes[-1])
        """
        result = await find_by_cursor(
            self.data_source(
                session,
                statement=statement,
                join_associations=settings.join_associations if settings is not None else None,
            ),
            order=order,
            first=first,
            last=last,
            after=after,
            before=before,
            filter=filter,
            options=options,
            settings=settings,
        )

        self._lazy.debug(
            lambda: f"db.find_by_cursor: {self.model.__name__}"
            f"(first={first}, last={last}, cursor_keys={result.cursor_keys}) -> {len(result.nodes)} items"
        )
        return result


__all__ = ["BaseRepository"]
