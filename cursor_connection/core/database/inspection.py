"""SQLAlchemy mapper inspection for unique key metadata.

Cursor pagination needs to know which sets of attributes identify a row:
the primary key, every unique constraint, and every unique index. These
helpers read them from the mapper and table metadata without touching the
database.

Example:
    >>> get_primary_key_columns(User)
    [KeyColumn(attribute='id', column='id')]
    >>> get_unique_key_groups(User)
    [[KeyColumn('id', 'id')], [KeyColumn('external_id', 'external_id')], ...]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import UniqueConstraint
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper
from sqlalchemy.orm.exc import UnmappedColumnError

from cursor_connection.core.exceptions import InvalidSchema
from cursor_connection.core.pagination.ordering import KeyColumn

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Column


def get_mapper(model: type[Any]) -> Mapper[Any]:
    """Return the mapper of an ORM model class.

    Raises:
        InvalidSchema: If ``model`` is not a mapped class
    """
    mapper = sa_inspect(model, raiseerr=False)
    if not isinstance(mapper, Mapper):
        name = getattr(model, "__name__", repr(model))
        raise InvalidSchema(f"{name} is not a mapped SQLAlchemy model", model_name=name)
    return mapper


def _key_columns(mapper: Mapper[Any], columns: Iterable[Column[Any]]) -> list[KeyColumn] | None:
    """Map table columns to attribute names; None if any column is unmapped."""
    keys = []
    for column in columns:
        try:
            attribute = mapper.get_property_by_column(column).key
        except UnmappedColumnError:
            return None
        keys.append(KeyColumn(attribute, column.name))
    return keys


def get_primary_key_columns(model: type[Any]) -> list[KeyColumn]:
    """Primary key attributes of ``model``, in mapper order.

    Returns:
        One KeyColumn per primary key column (empty for unusual mappings
        that map no primary key columns)
    """
    mapper = get_mapper(model)
    return _key_columns(mapper, mapper.primary_key) or []


def get_unique_key_groups(model: type[Any]) -> list[list[KeyColumn]]:
    """Every group of attributes that is unique per row, primary key first.

    Sources, after the primary key:
        - UniqueConstraint on the mapped table (``Column(unique=True)``
          and ``UniqueConstraint(...)`` in ``__table_args__``)
        - unique Index on plain columns (expression indexes are skipped)

    Groups containing a nullable column are skipped: a unique constraint
    admits any number of NULLs, so such a group does not identify a row.

    Non-primary groups are de-duplicated and sorted by column names so the
    result does not depend on set iteration order.
    """
    mapper = get_mapper(model)
    primary_key = get_primary_key_columns(model)
    table = mapper.local_table

    candidates: list[list[Column[Any]]] = []
    for constraint in getattr(table, "constraints", ()):
        if isinstance(constraint, UniqueConstraint):
            candidates.append(list(constraint.columns))
    for index in getattr(table, "indexes", ()):
        if index.unique and len(index.columns) == len(index.expressions):
            candidates.append(list(index.columns))

    seen = {frozenset(primary_key)}
    groups: list[list[KeyColumn]] = []
    for columns in candidates:
        if any(column.nullable for column in columns):
            continue
        keys = _key_columns(mapper, columns)
        if not keys or frozenset(keys) in seen:
            continue
        seen.add(frozenset(keys))
        groups.append(keys)

    groups.sort(key=lambda group: [key.column for key in group])
    return [primary_key, *groups]


__all__ = [
    "get_mapper",
    "get_primary_key_columns",
    "get_unique_key_groups",
]
