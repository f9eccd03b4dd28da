"""
imes - In-memory event sourcing for Python.

This library provides:
- Events orchestrator: emit, preview, replay and listener notification
- Projections driven by declarative init / select-one / select-many handlers
- In-memory store with cursor pagination and composable filter predicates
- Caching and batching store decorators
- Newline-delimited JSON event files
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("imes")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from imes.config import EventsConfig
from imes.events import (
    EmitResult,
    Event,
    EventMeta,
    Events,
    PayloadRegistry,
    build_event,
    generate_random_id,
    get_current_time,
    sequential_id_generator,
)
from imes.exceptions import (
    DuplicateEventNameError,
    ImesError,
    InvalidCursorError,
    PayloadValidationError,
    SerializationError,
    UnknownEventNameError,
)
from imes.filters import (
    EqualFilter,
    OrdFilter,
    PrefixFilter,
    TextFilter,
    equal_predicate,
    field_predicates,
    ord_predicate,
    prefix_predicate,
)
from imes.projections import (
    InitHandler,
    Item,
    ItemMeta,
    ItemUpdate,
    Projection,
    SelectManyHandler,
    SelectOneHandler,
    default_init_meta,
    default_update_meta,
)
from imes.stores import (
    BatchingStore,
    CachingStore,
    InMemoryStore,
    Query,
    QueryResult,
    Store,
    canonical_key,
)
from imes.streams import EventFileWriter, iter_events, read_events, write_events

__all__ = [
    # Version
    "__version__",
    # Configuration
    "EventsConfig",
    # Events
    "Event",
    "EventMeta",
    "Events",
    "EmitResult",
    "PayloadRegistry",
    "build_event",
    "generate_random_id",
    "get_current_time",
    "sequential_id_generator",
    # Exceptions
    "ImesError",
    "InvalidCursorError",
    "UnknownEventNameError",
    "DuplicateEventNameError",
    "PayloadValidationError",
    "SerializationError",
    # Filters
    "EqualFilter",
    "OrdFilter",
    "PrefixFilter",
    "TextFilter",
    "equal_predicate",
    "ord_predicate",
    "prefix_predicate",
    "field_predicates",
    # Projections
    "Projection",
    "InitHandler",
    "SelectOneHandler",
    "SelectManyHandler",
    "Item",
    "ItemMeta",
    "ItemUpdate",
    "default_init_meta",
    "default_update_meta",
    # Stores
    "Store",
    "InMemoryStore",
    "CachingStore",
    "BatchingStore",
    "Query",
    "QueryResult",
    "canonical_key",
    # Streams
    "EventFileWriter",
    "read_events",
    "iter_events",
    "write_events",
]
