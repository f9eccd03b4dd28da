"""
Shared pytest fixtures for the imes library tests.

This module provides:
- Store fixtures (post_store, populated_post_store, event_store)
- Projection fixtures (post_projection)
- Orchestrator fixtures (post_events)
- Tracing fixtures (mock_tracer)
"""

from __future__ import annotations

import pytest

from imes.events import Event, Events
from imes.observability import MockTracer
from imes.projections import Item, Projection
from imes.stores import InMemoryStore
from tests.fixtures import (
    SAMPLE_POSTS,
    create_post_events,
    create_post_projection,
    create_post_store,
)


@pytest.fixture
def mock_tracer() -> MockTracer:
    """Tracer recording span names and attributes."""
    return MockTracer()


@pytest.fixture
def post_store() -> InMemoryStore[Item]:
    """Empty post store with the typed post filter."""
    return create_post_store()


@pytest.fixture
def populated_post_store() -> InMemoryStore[Item]:
    """Post store holding SAMPLE_POSTS (p1..p4, in that order)."""
    return create_post_store(SAMPLE_POSTS)


@pytest.fixture
def event_store() -> InMemoryStore[Event]:
    """Empty event store."""
    return InMemoryStore()


@pytest.fixture
def post_projection(post_store: InMemoryStore[Item]) -> Projection:
    """Post projection backed by post_store."""
    return create_post_projection(post_store)


@pytest.fixture
def post_events(event_store: InMemoryStore[Event], post_projection: Projection) -> Events:
    """Orchestrator with the post projection and sequential keys and times."""
    return create_post_events(post_projection, event_store)
