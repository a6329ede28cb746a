"""Pagination settings.

Environment variables use the CURSOR_PAGINATION_ prefix.
Example: CURSOR_PAGINATION_MAX_LIMIT=100
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Cursor pagination configuration.

    Attributes:
        max_limit: Largest accepted ``first``/``last`` value. ``None`` disables the cap.
        join_associations: Whether the SQLAlchemy data source joins the
            relationships named by ``$relation.field$`` order references.

    Example:
        settings = PaginationSettings(max_limit=100)
        result = await find_by_cursor(source, order=..., first=50, settings=settings)
    """

    max_limit: int | None = Field(
        default=None,
        ge=0,
        description="Maximum allowed page size (None = unbounded)",
    )
    join_associations: bool = Field(
        default=True,
        description="Join relationships referenced as $relation.field$ in the order",
    )

    model_config = SettingsConfigDict(
        env_prefix="CURSOR_PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
