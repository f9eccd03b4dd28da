"""
Stores for events and projection items.

Exports:
- Store: Abstract base class
- Query / QueryResult: Cursor-paginated queries
- InMemoryStore: Reference implementation
- CachingStore / BatchingStore: Composition decorators
- canonical_key: Deterministic key encoding
"""

from imes.stores.batching import BatchingStore
from imes.stores.caching import CachingStore
from imes.stores.in_memory import (
    InMemoryStore,
    default_filter_predicates,
    default_item_key,
)
from imes.stores.interface import Query, QueryResult, Store, TItem, canonical_key

__all__ = [
    "Store",
    "TItem",
    "Query",
    "QueryResult",
    "canonical_key",
    "InMemoryStore",
    "default_item_key",
    "default_filter_predicates",
    "CachingStore",
    "BatchingStore",
]
