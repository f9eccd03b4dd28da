"""
Events: the envelope, the payload registry and the orchestrator.

Exports:
- Event / EventMeta: Immutable event envelope
- build_event: Envelope construction with metadata merge
- sequential_id_generator / generate_random_id / get_current_time: Key and time sources
- PayloadRegistry: Closed set of event names with payload models
- Events / EmitResult: Emission, replay and notification
"""

from imes.events.base import (
    Event,
    EventMeta,
    KeyGenerator,
    TimeSource,
    build_event,
    generate_random_id,
    get_current_time,
    sequential_id_generator,
)
from imes.events.orchestrator import EmitResult, EventRecord, Events, Listener
from imes.events.registry import PayloadRegistry

__all__ = [
    "Event",
    "EventMeta",
    "KeyGenerator",
    "TimeSource",
    "build_event",
    "generate_random_id",
    "get_current_time",
    "sequential_id_generator",
    "PayloadRegistry",
    "Events",
    "EmitResult",
    "EventRecord",
    "Listener",
]
