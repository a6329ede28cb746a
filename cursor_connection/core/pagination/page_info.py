"""hasNextPage / hasPreviousPage resolution.

Follows the connection contract:

hasPreviousPage
    1. If ``last`` is set, it is whether the fetch found more rows than
       ``last`` (already known from the over-fetch).
    2. If ``after`` is set, it is whether any row exists before ``after``:
       answered with a zero-size backward probe.
    3. Otherwise false.

hasNextPage is the mirror image (``first``, ``before``, forward probe).

A zero-size probe still fetches one row (the over-fetch), so it is a
single existence check rather than a page read.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cursor_connection.core.pagination.fetcher import fetch_page
from cursor_connection.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from cursor_connection.core.pagination.datasource import DataSource
    from cursor_connection.core.pagination.fetcher import PageRequest

_lazy = get_lazy_logger(__name__)


async def resolve_has_next_page(
    data_source: DataSource,
    request: PageRequest,
    has_more_nodes: bool,
) -> bool:
    """Whether rows exist after the window defined by ``request``.

    Args:
        data_source: Storage collaborator (used only for the probe)
        request: The request the page was fetched with
        has_more_nodes: Over-fetch signal of that page

    Returns:
        True if another page exists in the forward direction
    """
    if not request.is_backward:
        return has_more_nodes

    if request.before is not None:
        probe = await fetch_page(data_source, request.probe_after(request.before))
        _lazy.debug(lambda: f"has_next_page probe -> {probe.has_more_nodes}")
        return probe.has_more_nodes

    return False


async def resolve_has_previous_page(
    data_source: DataSource,
    request: PageRequest,
    has_more_nodes: bool,
) -> bool:
    """Whether rows exist before the window defined by ``request``.

    Args:
        data_source: Storage collaborator (used only for the probe)
        request: The request the page was fetched with
        has_more_nodes: Over-fetch signal of that page

    Returns:
        True if another page exists in the backward direction
    """
    if request.is_backward:
        return has_more_nodes

    if request.after is not None:
        probe = await fetch_page(data_source, request.probe_before(request.after))
        _lazy.debug(lambda: f"has_previous_page probe -> {probe.has_more_nodes}")
        return probe.has_more_nodes

    return False


__all__ = ["resolve_has_next_page", "resolve_has_previous_page"]
