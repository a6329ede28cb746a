"""Connection response schemas.

``ConnectionResult.to_connection()`` turns a fetched page into these
models for API layers (REST responses, GraphQL resolvers). Cursors are the
plain ``{field: value}`` mappings the next request passes back as
``after``/``before``; they are not encoded.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageInfo(BaseModel):
    """Pagination metadata following the Relay connection specification.

    Attributes:
        has_previous_page: Whether there are items before the current page
        has_next_page: Whether there are items after the current page
        start_cursor: Cursor of the first item in this page
        end_cursor: Cursor of the last item in this page
    """

    has_previous_page: bool = Field(description="Whether previous items exist")
    has_next_page: bool = Field(description="Whether more items exist")
    start_cursor: dict[str, Any] | None = Field(
        default=None,
        description="Cursor of the first item",
    )
    end_cursor: dict[str, Any] | None = Field(
        default=None,
        description="Cursor of the last item",
    )


class Edge(BaseModel, Generic[T]):
    """A node together with the cursor that points at it."""

    node: T = Field(description="The data item")
    cursor: dict[str, Any] = Field(description="Cursor for this item")


class Connection(BaseModel, Generic[T]):
    """Connection-style page: edges plus navigation metadata.

    Client navigation:
        # First page
        first=10

        # Next page (end_cursor from the previous response)
        first=10, after=page_info.end_cursor

        # Previous page (start_cursor from the previous response)
        last=10, before=page_info.start_cursor
    """

    edges: list[Edge[T]] = Field(
        default_factory=list,
        description="List of edges (items with cursors)",
    )
    page_info: PageInfo = Field(description="Pagination metadata")
    cursor_keys: list[str] = Field(
        default_factory=list,
        description="Fields every cursor of this connection contains",
    )

    @property
    def nodes(self) -> list[T]:
        """Get just the nodes without edge wrappers."""
        return [edge.node for edge in self.edges]


__all__ = [
    "Connection",
    "Edge",
    "PageInfo",
]
