"""
Store interface and query data structures.

A store is the authoritative keyed collection behind a projection or the
event log. The in-memory store is the reference implementation; durable
backends implement the same contract.

This module provides:
- Query: Cursor, page size and filter for ``find``
- QueryResult: One page of items plus the cursor to resume from
- Store: Abstract base class for store implementations
- canonical_key: Deterministic string encoding of item keys
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from imes.serialization import json_dumps

TItem = TypeVar("TItem")


def canonical_key(key: Any) -> str:
    """
    Encode a key as a string that does not depend on field order.

    Strings pass through unchanged; every other key (numbers, tuples,
    mappings, pydantic models) is JSON-encoded with sorted fields, so
    ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}`` encode identically.

    Example:
        >>> canonical_key("p1")
        'p1'
        >>> canonical_key({"b": 2, "a": 1})
        '{"a":1,"b":2}'
    """
    if isinstance(key, str):
        return key
    if isinstance(key, BaseModel):
        key = key.model_dump(mode="json")
    return json_dumps(key, sort_keys=True)


@dataclass(frozen=True)
class Query:
    """
    Query parameters for ``Store.find``.

    Attributes:
        cursor: Key of the last item already seen; results start after it
        limit: Maximum number of items to return
        filter: Store-specific filter object, interpreted by the store's
            ``get_filter_predicates`` generator

    Example:
        >>> page = await store.find(Query(limit=20))
        >>> next_page = await store.find(Query(cursor=page.cursor, limit=20))
    """

    cursor: Any = None
    limit: int | None = None
    filter: Any = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 1:
            raise ValueError(f"limit must be positive, got {self.limit}")

    def with_cursor(self, cursor: Any) -> "Query":
        """Create a new Query resuming after ``cursor`` with the same filter and limit."""
        return Query(cursor=cursor, limit=self.limit, filter=self.filter)


@dataclass(frozen=True)
class QueryResult(Generic[TItem]):
    """
    One page of ``find`` results.

    Attributes:
        items: Items on this page, in store iteration order
        cursor: Key of the last returned item when more items remain,
            None on the final page
    """

    items: list[TItem] = field(default_factory=list)
    cursor: Any = None

    @property
    def has_more(self) -> bool:
        """True if another page follows."""
        return self.cursor is not None


class Store(ABC, Generic[TItem]):
    """
    Abstract base class for stores.

    Subclasses must implement:
    - get(): Point lookup, returns None on miss
    - create() / update(): Upsert by key
    - find(): Filter then cursor-paginate
    - clear(): Remove all items
    - get_item_key(): Key of an item

    ``setup()`` and ``teardown()`` are lifecycle hooks for backends that
    hold connections; they default to no-ops.
    """

    @abstractmethod
    def get_item_key(self, item: TItem) -> Any:
        """Return the key identifying ``item``."""
        pass

    def key_to_string(self, key: Any) -> str:
        """Return the canonical string form of ``key``."""
        return canonical_key(key)

    @abstractmethod
    async def get(self, key: Any) -> TItem | None:
        """
        Get an item by key.

        Args:
            key: Item key

        Returns:
            The item, or None if no item has that key
        """
        pass

    async def get_many(self, keys: Iterable[Any]) -> list[TItem | None]:
        """
        Get several items, one result per key in the same order.

        The default implementation issues concurrent ``get`` calls.
        """
        return list(await asyncio.gather(*(self.get(key) for key in keys)))

    @abstractmethod
    async def create(self, item: TItem) -> None:
        """Store a new item, overwriting any item with the same key."""
        pass

    @abstractmethod
    async def update(self, item: TItem) -> None:
        """Store an updated item, overwriting any item with the same key."""
        pass

    @abstractmethod
    async def find(self, query: Query | None = None) -> QueryResult[TItem]:
        """
        Find items matching a query.

        Raises:
            InvalidCursorError: If ``query.cursor`` is not among the
                filtered items
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove all items."""
        pass

    async def setup(self) -> None:
        """Prepare the backend (no-op by default)."""

    async def teardown(self) -> None:
        """Release backend resources (no-op by default)."""


__all__ = [
    "Query",
    "QueryResult",
    "Store",
    "TItem",
    "canonical_key",
]
