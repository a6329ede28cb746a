"""Connection-style keyset pagination for async SQLAlchemy.

    from cursor_connection import BaseRepository

    result = await BaseRepository(User).find_by_cursor(
        session,
        order=[("first_name", "ASC"), ("last_name", "ASC")],
        first=2,
        after={"first_name": "Cedric", "last_name": "Anderson", "id": 3},
    )
"""

from cursor_connection.core.database import BaseRepository, SqlAlchemyDataSource
from cursor_connection.core.exceptions import (
    InvalidPaginationArguments,
    InvalidSchema,
    MalformedCursor,
    PaginationError,
)
from cursor_connection.core.pagination import (
    Connection,
    ConnectionResult,
    DataSource,
    Direction,
    FetchQuery,
    OrderItem,
    find_by_cursor,
)
from cursor_connection.core.settings import PaginationSettings, get_pagination_settings

__version__ = "0.1.0"

__all__ = [
    "BaseRepository",
    "Connection",
    "ConnectionResult",
    "DataSource",
    "Direction",
    "FetchQuery",
    "InvalidPaginationArguments",
    "InvalidSchema",
    "MalformedCursor",
    "OrderItem",
    "PaginationError",
    "PaginationSettings",
    "SqlAlchemyDataSource",
    "find_by_cursor",
    "get_pagination_settings",
]
