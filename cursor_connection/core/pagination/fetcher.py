"""Single bounded page fetch.

The fetch always asks for ``limit + 1`` rows: if the extra row comes back,
there is at least one more row beyond the page in the fetch direction, and
no COUNT query is needed to know it.

For ``last``-style (backward) pages the order is flipped before fetching so
that the data source can read rows from the boundary outwards, and the
rows are flipped back afterwards so callers always see them in the order
they asked for.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from cursor_connection.core.exceptions import InvalidPaginationArguments
from cursor_connection.core.pagination.datasource import FetchQuery
from cursor_connection.core.pagination.ordering import describe_order, reverse_order
from cursor_connection.core.pagination.predicates import (
    CursorKind,
    Predicate,
    build_cursor_predicate,
    conjoin,
)
from cursor_connection.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from cursor_connection.core.pagination.datasource import DataSource
    from cursor_connection.core.pagination.ordering import OrderSpec

_lazy = get_lazy_logger(__name__)


class PageDirection(StrEnum):
    FORWARD = "forward"  # first
    BACKWARD = "backward"  # last


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Everything needed to fetch one page (or probe beyond one).

    Attributes:
        order: Normalized order the page is expressed in
        limit: Page size (0 for probes)
        direction: FORWARD for ``first``, BACKWARD for ``last``
        after: Cursor the page starts strictly after
        before: Cursor the page ends strictly before
        filter: Caller filter, AND-ed with the cursor condition
        options: Pass-through options for the data source
    """

    order: OrderSpec
    limit: int
    direction: PageDirection = PageDirection.FORWARD
    after: Mapping[str, Any] | None = None
    before: Mapping[str, Any] | None = None
    filter: Predicate | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_backward(self) -> bool:
        return self.direction is PageDirection.BACKWARD

    def probe_after(self, cursor: Mapping[str, Any]) -> PageRequest:
        """Zero-size forward request for rows strictly after ``cursor``."""
        return replace(
            self, after=cursor, before=None, direction=PageDirection.FORWARD, limit=0
        )

    def probe_before(self, cursor: Mapping[str, Any]) -> PageRequest:
        """Zero-size backward request for rows strictly before ``cursor``."""
        return replace(
            self, before=cursor, after=None, direction=PageDirection.BACKWARD, limit=0
        )


@dataclass(frozen=True, slots=True)
class PageResult[T]:
    """Rows of one page.

    Attributes:
        nodes: Rows in the requested order
        has_more_nodes: Whether the fetch returned ``limit + 1`` rows, i.e.
            more rows exist beyond the page in the fetch direction
    """

    nodes: Sequence[T]
    has_more_nodes: bool


def build_page_filter(request: PageRequest) -> Predicate | None:
    """AND the caller filter with the cursor condition(s) of a request.

    Raises:
        MalformedCursor: If a cursor lacks a value for an order field
    """
    after = (
        build_cursor_predicate(request.order, request.after, CursorKind.AFTER)
        if request.after is not None
        else None
    )
    before = (
        build_cursor_predicate(request.order, request.before, CursorKind.BEFORE)
        if request.before is not None
        else None
    )
    return conjoin(request.filter, after, before)


async def fetch_page[T](data_source: DataSource[T], request: PageRequest) -> PageResult[T]:
    """Fetch one page, over-fetching by one row to detect more pages.

    Args:
        data_source: Storage collaborator to run the fetch against
        request: Page to fetch

    Returns:
        PageResult with at most ``request.limit`` nodes

    Raises:
        InvalidPaginationArguments: If both ``after`` and ``before`` are set
            or the limit is negative
        MalformedCursor: If a cursor lacks a value for an order field
    """
    if request.after is not None and request.before is not None:
        msg = "Having both 'before' and 'after' is not supported"
        raise InvalidPaginationArguments(msg, argument="before")
    if request.limit < 0:
        raise InvalidPaginationArguments("'limit' cannot be < 0", argument="limit")

    query = FetchQuery(
        filter=build_page_filter(request),
        order=reverse_order(request.order) if request.is_backward else request.order,
        limit=request.limit + 1,
        options=request.options,
    )

    _lazy.debug(
        lambda: f"fetch_page: {request.direction} limit={request.limit} "
        f"order=[{describe_order(query.order)}] filter={query.filter}"
    )

    rows = list(await data_source.fetch(query))

    if request.is_backward:
        rows.reverse()

    has_more_nodes = len(rows) == request.limit + 1
    if has_more_nodes:
        if request.is_backward:
            rows.pop(0)
        else:
            rows.pop()

    _lazy.debug(
        lambda: f"fetch_page: {request.direction} -> {len(rows)} nodes, has_more_nodes={has_more_nodes}"
    )
    return PageResult(nodes=rows, has_more_nodes=has_more_nodes)


__all__ = [
    "PageDirection",
    "PageRequest",
    "PageResult",
    "build_page_filter",
    "fetch_page",
]
