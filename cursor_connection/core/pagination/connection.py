"""Connection-style cursor pagination entry point.

    result = await find_by_cursor(
        data_source,
        order=[("firstName", "ASC"), ("lastName", "ASC")],
        first=2,
        after={"firstName": "Cedric", "lastName": "Anderson", "id": 3},
    )
    result.nodes                    # the page, in the requested order
    await result.has_next_page()    # may run one cheap probe fetch
    result.cursor_keys              # ["firstName", "lastName", "id"]

Based on https://relay.dev/graphql/connections.htm
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cursor_connection.core.exceptions import InvalidPaginationArguments
from cursor_connection.core.pagination.fetcher import PageDirection, PageRequest, fetch_page
from cursor_connection.core.pagination.ordering import (
    AssociationField,
    cursor_keys,
    describe_order,
    normalize_order,
    parse_order,
)
from cursor_connection.core.pagination.page_info import (
    resolve_has_next_page,
    resolve_has_previous_page,
)
from cursor_connection.core.pagination.predicates import as_predicate
from cursor_connection.core.pagination.schemas import Connection, Edge, PageInfo
from cursor_connection.core.settings import get_pagination_settings
from cursor_connection.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from cursor_connection.core.pagination.datasource import DataSource
    from cursor_connection.core.pagination.ordering import KeyColumn, OrderItem
    from cursor_connection.core.settings import PaginationSettings

_lazy = get_lazy_logger(__name__)


@dataclass(slots=True)
class ConnectionResult[T]:
    """One page of a connection.

    ``has_next_page`` and ``has_previous_page`` are coroutines: depending
    on the request they either return the over-fetch signal already known
    or run a single zero-size probe fetch. Nothing is cached; each call
    re-evaluates.

    Attributes:
        nodes: Page rows, in the requested order
        cursor_keys: Field keys every cursor for this order must contain
        request: The request the page was fetched with
        has_more_nodes: Over-fetch signal of the primary fetch
    """

    nodes: list[T]
    cursor_keys: list[str]
    request: PageRequest
    has_more_nodes: bool
    data_source: DataSource[T] = field(repr=False)

    async def has_next_page(self) -> bool:
        return await resolve_has_next_page(self.data_source, self.request, self.has_more_nodes)

    async def has_previous_page(self) -> bool:
        return await resolve_has_previous_page(
            self.data_source, self.request, self.has_more_nodes
        )

    def cursor_for(self, node: T) -> dict[str, Any]:
        """Build the cursor pointing at ``node``.

        Reads every order field from the node (attributes or mapping keys;
        ``$relation.field$`` through the loaded relationship). Pass the
        result as ``after``/``before`` to continue from this node.
        """
        return {item.field.key: _read_field(node, item) for item in self.request.order}

    async def to_connection(self) -> Connection[T]:
        """Resolve page info and build a Connection response model.

        The two page-info lookups are awaited one after the other so that
        data sources bound to a single session stay valid.
        """
        edges = [Edge[Any](node=node, cursor=self.cursor_for(node)) for node in self.nodes]
        page_info = PageInfo(
            has_previous_page=await self.has_previous_page(),
            has_next_page=await self.has_next_page(),
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )
        return Connection[Any](edges=edges, page_info=page_info, cursor_keys=self.cursor_keys)


def _read_field(node: Any, item: OrderItem) -> Any:
    reference = item.field
    if isinstance(reference, AssociationField):
        related = _read_value(node, reference.relation)
        return _read_value(related, reference.field)
    return _read_value(node, reference.name)


def _read_value(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source[name]
    return getattr(source, name)


def _invalid(message: str, argument: str) -> InvalidPaginationArguments:
    _lazy.debug(lambda: f"find_by_cursor rejected: {message}")
    return InvalidPaginationArguments(message, argument=argument)


def _validate_limit(limit: Any, settings: PaginationSettings) -> int:
    # bool is an int subclass; True is not a page size
    if isinstance(limit, bool) or not isinstance(limit, int):
        msg = "'first' and 'last' must be integers, and one of them must be provided"
        raise _invalid(msg, "first")
    if limit < 0:
        raise _invalid("'first' and 'last' cannot be < 0", "first")
    if settings.max_limit is not None and limit > settings.max_limit:
        raise _invalid(f"'first' and 'last' cannot exceed {settings.max_limit}", "first")
    return limit


def _unique_groups(data_source: DataSource[Any]) -> list[Sequence[KeyColumn]]:
    """Primary key first, then every other unique group of the data source."""
    primary_key = list(data_source.get_primary_key_fields())
    groups: list[Sequence[KeyColumn]] = [primary_key]
    for group in data_source.get_unique_key_groups():
        if group and set(group) != set(primary_key):
            groups.append(list(group))
    return groups


def _model_name(data_source: DataSource[Any]) -> str | None:
    model = getattr(data_source, "model", None)
    return getattr(model, "__name__", None)


async def find_by_cursor[T](
    data_source: DataSource[T],
    *,
    order: Sequence[OrderItem | Sequence[Any]],
    first: int | None = None,
    last: int | None = None,
    after: Mapping[str, Any] | None = None,
    before: Mapping[str, Any] | None = None,
    filter: Any = None,  # noqa: A002
    options: Mapping[str, Any] | None = None,
    settings: PaginationSettings | None = None,
) -> ConnectionResult[T]:
    """Fetch one page of ``data_source`` using connection-style arguments.

    Args:
        data_source: Storage collaborator (e.g. SqlAlchemyDataSource)
        order: ``(field, "ASC"|"DESC")`` pairs; fields may be
            ``$relation.field$`` references
        first: Page size, reading forward from ``after`` (or the start)
        last: Page size, reading backward from ``before`` (or the end)
        after: Cursor; only rows strictly after it are returned
        before: Cursor; only rows strictly before it are returned
        filter: Caller filter: a Predicate, a ``{field: value}`` mapping,
            or a backend-native expression. Combined with the cursor
            condition using AND.
        options: Pass-through options for the data source
        settings: Overrides the cached PaginationSettings

    Returns:
        ConnectionResult for the page

    Raises:
        InvalidPaginationArguments: On any invalid argument combination
        MalformedCursor: If a cursor lacks a value for an order field
        InvalidSchema: If the order cannot be made total
    """
    settings = settings or get_pagination_settings()

    sort_order = parse_order(order, resolve=data_source.resolve_association_reference)

    if after is not None and before is not None:
        msg = "Having both 'before' and 'after' is not currently supported"
        raise _invalid(msg, "before")

    if first is not None and last is not None:
        raise _invalid("Having both 'first' and 'last' is not supported", "last")

    limit = _validate_limit(first if first is not None else last, settings)

    normalized = normalize_order(
        sort_order, _unique_groups(data_source), model_name=_model_name(data_source)
    )

    request = PageRequest(
        order=normalized,
        limit=limit,
        direction=PageDirection.BACKWARD if last is not None else PageDirection.FORWARD,
        after=after,
        before=before,
        filter=as_predicate(filter),
        options=dict(options or {}),
    )

    _lazy.debug(
        lambda: f"find_by_cursor: {_model_name(data_source) or type(data_source).__name__} "
        f"order=[{describe_order(normalized)}] {request.direction} limit={limit}"
    )

    page = await fetch_page(data_source, request)

    return ConnectionResult(
        nodes=list(page.nodes),
        cursor_keys=cursor_keys(normalized),
        request=request,
        has_more_nodes=page.has_more_nodes,
        data_source=data_source,
    )


__all__ = ["ConnectionResult", "find_by_cursor"]
