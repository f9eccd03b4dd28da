"""
In-memory store implementation.

The reference implementation of the store contract, used for projections,
the event log, tests and single-process applications. All data is lost
when the process terminates.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from imes.exceptions import InvalidCursorError
from imes.filters import Predicate, field_predicates
from imes.observability import Tracer, create_tracer
from imes.observability.attributes import (
    ATTR_BATCH_SIZE,
    ATTR_ITEM_KEY,
    ATTR_QUERY_HAS_CURSOR,
    ATTR_QUERY_HAS_FILTER,
    ATTR_QUERY_LIMIT,
    ATTR_RESULT_COUNT,
    ATTR_STORE_TYPE,
)
from imes.stores.interface import Query, QueryResult, Store, TItem, canonical_key

logger = logging.getLogger(__name__)

GetItemKey = Callable[[Any], Any]
KeyToString = Callable[[Any], str]
GetFilterPredicates = Callable[[Any], Iterable[Predicate]]


def default_item_key(item: Any) -> Any:
    """Return ``item.key``, the key attribute of events and projection items."""
    return item.key


def default_filter_predicates(filter_: Any) -> Iterable[Predicate]:
    """
    Interpret a ``{field: constraint}`` mapping against item data.

    Raises:
        TypeError: If the filter is not a mapping; stores with custom filter
            types must supply their own ``get_filter_predicates``
    """
    if not isinstance(filter_, Mapping):
        raise TypeError(
            f"InMemoryStore cannot interpret filter of type {type(filter_).__name__}; "
            "pass get_filter_predicates to the store"
        )
    return field_predicates(filter_)


class InMemoryStore(Store[TItem]):
    """
    In-memory implementation of the store contract.

    Items are kept in a dictionary keyed by canonical key string, so
    iteration follows the order in which keys were first written.
    Rewriting an existing key replaces the item in place.

    Filtering is delegated to ``get_filter_predicates``: a callable (usually
    a generator) receiving ``query.filter`` and yielding predicates over
    items. An item is kept only if every predicate accepts it.

    Example:
        >>> def post_predicates(filter_):
        ...     if filter_.published is not None:
        ...         yield lambda post: equal_predicate(filter_.published)(post.data["published"])
        ...
        >>> store = InMemoryStore(get_filter_predicates=post_predicates)
        >>> await store.create(post)
        >>> page = await store.find(Query(limit=10, filter=PostFilter(published=EqualFilter(eq=True))))

    Note:
        - ``find`` is O(n) in the number of stored items
        - Use ``clear()`` for test teardown
    """

    def __init__(
        self,
        items: Iterable[TItem] | None = None,
        *,
        get_item_key: GetItemKey = default_item_key,
        key_to_string: KeyToString = canonical_key,
        get_filter_predicates: GetFilterPredicates = default_filter_predicates,
        tracer: Tracer | None = None,
        enable_tracing: bool = False,
    ) -> None:
        """
        Initialize the store.

        Args:
            items: Initial items, stored in order
            get_item_key: Extracts the key of an item (default ``item.key``)
            key_to_string: Canonical key encoding (default sorted-field JSON)
            get_filter_predicates: Turns a query filter into item predicates
            tracer: Optional custom Tracer instance
            enable_tracing: If True, emit OpenTelemetry spans. Ignored if
                tracer is explicitly provided.
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._get_item_key = get_item_key
        self._key_to_string = key_to_string
        self._get_filter_predicates = get_filter_predicates
        self._items: dict[str, TItem] = {}
        self._lock = asyncio.Lock()

        for item in items or ():
            self._items[self.key_to_string(get_item_key(item))] = item

    def get_item_key(self, item: TItem) -> Any:
        return self._get_item_key(item)

    def key_to_string(self, key: Any) -> str:
        return self._key_to_string(key)

    async def get(self, key: Any) -> TItem | None:
        """
        Get an item by key.

        Returns:
            The item if found, None otherwise
        """
        string_key = self.key_to_string(key)
        with self._tracer.span(
            "imes.store.get",
            {ATTR_STORE_TYPE: type(self).__name__, ATTR_ITEM_KEY: string_key},
        ):
            async with self._lock:
                return self._items.get(string_key)

    async def get_many(self, keys: Iterable[Any]) -> list[TItem | None]:
        """
        Get several items in one pass.

        Returns:
            One entry per key, None where the key is missing
        """
        string_keys = [self.key_to_string(key) for key in keys]
        with self._tracer.span(
            "imes.store.get_many",
            {ATTR_STORE_TYPE: type(self).__name__, ATTR_BATCH_SIZE: len(string_keys)},
        ):
            async with self._lock:
                return [self._items.get(key) for key in string_keys]

    async def create(self, item: TItem) -> None:
        """Store a new item (upsert)."""
        await self._write("imes.store.create", item)

    async def update(self, item: TItem) -> None:
        """Store an updated item (upsert)."""
        await self._write("imes.store.update", item)

    async def put(self, item: TItem) -> None:
        """Store an item regardless of whether its key exists (upsert)."""
        await self._write("imes.store.put", item)

    async def _write(self, span_name: str, item: TItem) -> None:
        string_key = self.key_to_string(self.get_item_key(item))
        with self._tracer.span(
            span_name,
            {ATTR_STORE_TYPE: type(self).__name__, ATTR_ITEM_KEY: string_key},
        ):
            async with self._lock:
                self._items[string_key] = item

    async def find(self, query: Query | None = None) -> QueryResult[TItem]:
        """
        Find items matching a query.

        Steps, in order: snapshot items in iteration order, keep items
        satisfying every filter predicate, skip past the cursor item, then
        truncate to ``limit``.

        Args:
            query: Cursor, limit and filter (all optional)

        Returns:
            QueryResult whose cursor is the last returned key when more
            items remain, None otherwise

        Raises:
            InvalidCursorError: If the cursor key is not among the
                filtered items
        """
        if query is None:
            query = Query()

        with self._tracer.span(
            "imes.store.find",
            {
                ATTR_STORE_TYPE: type(self).__name__,
                ATTR_QUERY_LIMIT: query.limit if query.limit is not None else -1,
                ATTR_QUERY_HAS_CURSOR: query.cursor is not None,
                ATTR_QUERY_HAS_FILTER: query.filter is not None,
            },
        ) as span:
            async with self._lock:
                items = list(self._items.values())

            if query.filter is not None:
                predicates = list(self._get_filter_predicates(query.filter))
                items = [item for item in items if all(p(item) for p in predicates)]

            if query.cursor is not None:
                items = self._after_cursor(items, query.cursor)

            cursor = None
            if query.limit is not None and len(items) > query.limit:
                items = items[: query.limit]
                cursor = self.get_item_key(items[-1])

            if span:
                span.set_attribute(ATTR_RESULT_COUNT, len(items))

            return QueryResult(items=items, cursor=cursor)

    def _after_cursor(self, items: list[TItem], cursor: Any) -> list[TItem]:
        cursor_key = self.key_to_string(cursor)
        for index, item in enumerate(items):
            if self.key_to_string(self.get_item_key(item)) == cursor_key:
                return items[index + 1 :]

        logger.debug(
            "Cursor %s not found in %s",
            cursor_key,
            type(self).__name__,
            extra={"cursor": cursor_key, "store": type(self).__name__},
        )
        raise InvalidCursorError(cursor)

    async def clear(self) -> None:
        """Remove all items."""
        with self._tracer.span("imes.store.clear", {ATTR_STORE_TYPE: type(self).__name__}):
            async with self._lock:
                self._items.clear()

    def __len__(self) -> int:
        """Return the number of stored items."""
        return len(self._items)

    def __contains__(self, key: Any) -> bool:
        """Support 'in' for key membership."""
        return self.key_to_string(key) in self._items
