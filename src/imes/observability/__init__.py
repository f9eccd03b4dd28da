"""
Observability utilities for imes.

Composition-based tracing built on the OpenTelemetry API and the standard
attribute names used across all components.

Example:
    >>> from imes.observability import create_tracer
    >>>
    >>> class MyStore:
    ...     def __init__(self, enable_tracing: bool = True):
    ...         self._tracer = create_tracer(__name__, enable_tracing)
"""

from imes.observability.attributes import (
    ATTR_ACTOR_ID,
    ATTR_BATCH_SIZE,
    ATTR_EVENT_COUNT,
    ATTR_EVENT_KEY,
    ATTR_EVENT_NAME,
    ATTR_HANDLER_KIND,
    ATTR_ITEM_KEY,
    ATTR_PROJECTION_COUNT,
    ATTR_PROJECTION_NAME,
    ATTR_QUERY_HAS_CURSOR,
    ATTR_QUERY_HAS_FILTER,
    ATTR_QUERY_LIMIT,
    ATTR_RESULT_COUNT,
    ATTR_STORE_TYPE,
    ATTR_UPDATE_COUNT,
)
from imes.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    RecordedSpan,
    Tracer,
    create_tracer,
)

__all__ = [
    # Tracer (composition-based API)
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "RecordedSpan",
    "create_tracer",
    # Attributes - Event
    "ATTR_EVENT_KEY",
    "ATTR_EVENT_NAME",
    "ATTR_EVENT_COUNT",
    "ATTR_ACTOR_ID",
    # Attributes - Projection
    "ATTR_PROJECTION_NAME",
    "ATTR_PROJECTION_COUNT",
    "ATTR_HANDLER_KIND",
    "ATTR_UPDATE_COUNT",
    # Attributes - Store
    "ATTR_STORE_TYPE",
    "ATTR_ITEM_KEY",
    "ATTR_BATCH_SIZE",
    "ATTR_QUERY_LIMIT",
    "ATTR_QUERY_HAS_CURSOR",
    "ATTR_QUERY_HAS_FILTER",
    "ATTR_RESULT_COUNT",
]
