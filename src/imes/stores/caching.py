"""
Caching store decorator.

Wraps another store and keeps every item it reads or writes in memory.
Concurrent reads of the same missing key share a single request to the
wrapped store.
"""

import asyncio
import logging
from typing import Any

from imes.observability import Tracer, create_tracer
from imes.observability.attributes import ATTR_ITEM_KEY, ATTR_STORE_TYPE
from imes.stores.interface import Query, QueryResult, Store, TItem

logger = logging.getLogger(__name__)


class CachingStore(Store[TItem]):
    """
    Store decorator that caches items by canonical key.

    - ``get`` serves cached items without touching the wrapped store
    - concurrent ``get`` calls for the same key share one in-flight read
    - only found items are cached; a miss is asked again next time
    - ``create`` and ``update`` refresh the cache and write through
    - ``find`` always delegates and does not populate the cache

    Example:
        >>> store = CachingStore(InMemoryStore())
        >>> await store.create(item)
        >>> await store.get(item.key)  # served from cache

    Note:
        The cache is never evicted. Call ``clear_cache()`` when the wrapped
        store is changed behind this decorator's back.
    """

    def __init__(
        self,
        store: Store[TItem],
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = False,
    ) -> None:
        """
        Initialize the caching store.

        Args:
            store: The store to wrap
            tracer: Optional custom Tracer instance
            enable_tracing: If True, emit OpenTelemetry spans. Ignored if
                tracer is explicitly provided.
        """
        self._store = store
        self._cache: dict[str, TItem] = {}
        self._pending: dict[str, asyncio.Task[TItem | None]] = {}
        self._generation = 0
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @property
    def store(self) -> Store[TItem]:
        """The wrapped store."""
        return self._store

    def get_item_key(self, item: TItem) -> Any:
        return self._store.get_item_key(item)

    def key_to_string(self, key: Any) -> str:
        return self._store.key_to_string(key)

    async def get(self, key: Any) -> TItem | None:
        cache_key = self.key_to_string(key)

        if cache_key in self._cache:
            return self._cache[cache_key]

        pending = self._pending.get(cache_key)
        if pending is None:
            with self._tracer.span(
                "imes.store.cache_miss",
                {ATTR_STORE_TYPE: type(self._store).__name__, ATTR_ITEM_KEY: cache_key},
            ):
                pending = asyncio.ensure_future(self._store.get(key))
            self._pending[cache_key] = pending
            generation = self._generation
            pending.add_done_callback(
                lambda task: self._on_read_done(cache_key, generation, task)
            )

        return await asyncio.shield(pending)

    def _on_read_done(
        self, cache_key: str, generation: int, task: asyncio.Task[TItem | None]
    ) -> None:
        if self._pending.get(cache_key) is task:
            del self._pending[cache_key]
        if task.cancelled() or task.exception() is not None:
            return
        # a clear happened while the read was in flight
        if generation != self._generation:
            return
        item = task.result()
        if item is not None:
            self._cache.setdefault(cache_key, item)

    async def create(self, item: TItem) -> None:
        self._cache[self.key_to_string(self.get_item_key(item))] = item
        await self._store.create(item)

    async def update(self, item: TItem) -> None:
        self._cache[self.key_to_string(self.get_item_key(item))] = item
        await self._store.update(item)

    async def find(self, query: Query | None = None) -> QueryResult[TItem]:
        return await self._store.find(query)

    def clear_cache(self) -> None:
        """Drop every cached item; the wrapped store is untouched."""
        self._cache.clear()
        self._pending.clear()
        self._generation += 1
        logger.debug("Cleared cache for %s", type(self._store).__name__)

    async def clear(self) -> None:
        """Empty the cache and the wrapped store."""
        self.clear_cache()
        await self._store.clear()

    async def setup(self) -> None:
        await self._store.setup()

    async def teardown(self) -> None:
        await self._store.teardown()

    def __len__(self) -> int:
        """Return the number of cached items."""
        return len(self._cache)
