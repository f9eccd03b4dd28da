"""
Standard span attributes for imes.

Attribute constants shared by stores, projections and the events
orchestrator so that span attributes stay consistent.

Example:
    >>> from imes.observability.attributes import ATTR_EVENT_NAME
    >>>
    >>> with tracer.span("imes.events.emit", {ATTR_EVENT_NAME: "PostCreated"}):
    ...     pass
"""

# =============================================================================
# Event Attributes
# =============================================================================

ATTR_EVENT_KEY = "imes.event.key"
"""Generated key of the event (string)."""

ATTR_EVENT_NAME = "imes.event.name"
"""Name of the event (e.g., 'PostCreated')."""

ATTR_EVENT_COUNT = "imes.event.count"
"""Number of events in an operation (integer)."""

ATTR_ACTOR_ID = "imes.actor.id"
"""Actor who emitted the event, when supplied in the context (string)."""

# =============================================================================
# Projection Attributes
# =============================================================================

ATTR_PROJECTION_NAME = "imes.projection.name"
"""Name of the projection processing the event (string)."""

ATTR_PROJECTION_COUNT = "imes.projection.count"
"""Number of projections an event fans out to (integer)."""

ATTR_HANDLER_KIND = "imes.handler.kind"
"""Handler variant applied to the event: init, select_one or select_many."""

ATTR_UPDATE_COUNT = "imes.update.count"
"""Number of item updates produced (integer)."""

# =============================================================================
# Store Attributes
# =============================================================================

ATTR_STORE_TYPE = "imes.store.type"
"""Class name of the store (string)."""

ATTR_ITEM_KEY = "imes.item.key"
"""Canonical key of the item (string)."""

ATTR_BATCH_SIZE = "imes.batch.size"
"""Number of keys in a batched read (integer)."""

ATTR_QUERY_LIMIT = "imes.query.limit"
"""Page size requested by a query (-1 when unbounded)."""

ATTR_QUERY_HAS_CURSOR = "imes.query.has_cursor"
"""Whether the query resumes from a cursor (boolean)."""

ATTR_QUERY_HAS_FILTER = "imes.query.has_filter"
"""Whether the query carries a filter (boolean)."""

ATTR_RESULT_COUNT = "imes.result.count"
"""Number of items returned by a query (integer)."""
