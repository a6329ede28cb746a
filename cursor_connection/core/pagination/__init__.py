"""Keyset (cursor) pagination with connection semantics.

Pagination is expressed as a predicate relative to the last-seen row's
sort key instead of an OFFSET, so pages stay stable under concurrent writes
and cost the same no matter how deep the client has paged.

Pieces, leaf first:
    - ordering: order parsing and normalization into a total order
    - predicates: predicate tree and the "strictly after/before cursor" condition
    - fetcher: one bounded fetch with the +1 over-fetch
    - page_info: has_next_page / has_previous_page resolution
    - connection: the find_by_cursor entry point
"""

from cursor_connection.core.pagination.connection import ConnectionResult, find_by_cursor
from cursor_connection.core.pagination.datasource import DataSource, FetchQuery
from cursor_connection.core.pagination.fetcher import (
    PageDirection,
    PageRequest,
    PageResult,
    fetch_page,
)
from cursor_connection.core.pagination.ordering import (
    AssociationField,
    Direction,
    KeyColumn,
    OrderItem,
    PlainField,
    match_association_reference,
    normalize_order,
    parse_order,
    reverse_order,
)
from cursor_connection.core.pagination.page_info import (
    resolve_has_next_page,
    resolve_has_previous_page,
)
from cursor_connection.core.pagination.predicates import (
    And,
    Clause,
    Compare,
    CursorKind,
    Operator,
    Or,
    build_cursor_predicate,
)
from cursor_connection.core.pagination.schemas import Connection, Edge, PageInfo

__all__ = [
    "And",
    "AssociationField",
    "Clause",
    "Compare",
    "Connection",
    "ConnectionResult",
    "CursorKind",
    "DataSource",
    "Direction",
    "Edge",
    "FetchQuery",
    "KeyColumn",
    "Operator",
    "Or",
    "OrderItem",
    "PageDirection",
    "PageInfo",
    "PageRequest",
    "PageResult",
    "PlainField",
    "build_cursor_predicate",
    "fetch_page",
    "find_by_cursor",
    "match_association_reference",
    "normalize_order",
    "parse_order",
    "resolve_has_next_page",
    "resolve_has_previous_page",
    "reverse_order",
]
