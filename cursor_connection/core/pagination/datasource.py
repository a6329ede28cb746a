"""Storage collaborator used by the pagination core.

The core never touches SQL or ORM metadata directly. Anything that can run
an ordered, filtered, limited fetch and describe its unique keys can be
paginated; ``SqlAlchemyDataSource`` is the bundled implementation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cursor_connection.core.pagination.ordering import KeyColumn, OrderSpec
    from cursor_connection.core.pagination.predicates import Predicate


@dataclass(frozen=True, slots=True)
class FetchQuery:
    """One bounded fetch.

    Attributes:
        filter: Combined caller filter and cursor condition (None = all rows)
        order: Order the rows must be returned in, exactly
        limit: Hard cap on the number of rows returned
        options: Pass-through options for the data source (loader options,
            execution options, ...)
    """

    filter: Predicate | None
    order: OrderSpec
    limit: int
    options: Mapping[str, Any] = field(default_factory=dict)


@runtime_checkable
class DataSource[T](Protocol):
    """Capability interface the pagination core consumes.

    Implementations must honor ``query.order`` exactly and treat
    ``query.limit`` as a hard cap. Errors raised by ``fetch`` are not
    handled by the core.
    """

    async def fetch(self, query: FetchQuery) -> Sequence[T]:
        """Return the rows matching ``query.filter`` in ``query.order``."""
        ...

    def get_primary_key_fields(self) -> Sequence[KeyColumn]:
        """Primary key attributes of the paginated model."""
        ...

    def get_unique_key_groups(self) -> Sequence[Sequence[KeyColumn]]:
        """Groups of attributes unique per record, primary key first."""
        ...

    def resolve_association_reference(self, reference: str) -> tuple[str, str] | None:
        """Split ``$association.field$`` into its parts, or return None."""
        ...


__all__ = ["DataSource", "FetchQuery"]
