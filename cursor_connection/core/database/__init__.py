"""SQLAlchemy binding for cursor pagination.

Repository:
    - BaseRepository[T]: find_by_cursor with explicit session passing

Data source:
    - SqlAlchemyDataSource[T]: DataSource implementation over an AsyncSession
      or async_sessionmaker

Query Filters:
    - StatementFilter: Base class for Select modifiers
    - SeekFilter: WHERE + ORDER BY + LIMIT for one pagination fetch
    - render_predicate: Predicate tree -> SQLAlchemy boolean expression

Metadata:
    - get_primary_key_columns: Primary key attributes of a model
    - get_unique_key_groups: Primary key, unique constraints and unique indexes
"""

from cursor_connection.core.database.datasource import FETCH_OPTIONS, SqlAlchemyDataSource
from cursor_connection.core.database.filters import SeekFilter, StatementFilter, render_predicate
from cursor_connection.core.database.inspection import (
    get_mapper,
    get_primary_key_columns,
    get_unique_key_groups,
)
from cursor_connection.core.database.repository import BaseRepository

__all__ = [
    "FETCH_OPTIONS",
    "BaseRepository",
    "SeekFilter",
    "SqlAlchemyDataSource",
    "StatementFilter",
    "get_mapper",
    "get_primary_key_columns",
    "get_unique_key_groups",
    "render_predicate",
]
