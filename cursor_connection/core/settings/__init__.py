"""Pydantic Settings v2 configuration.

Import settings via the cached loader:
    from cursor_connection.core.settings import get_pagination_settings
"""

from __future__ import annotations

from .loader import get_pagination_settings
from .pagination import PaginationSettings

__all__ = [
    "PaginationSettings",
    "get_pagination_settings",
]
