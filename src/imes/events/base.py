"""
Event envelope and the functions that build it.

Events are immutable records of things that have happened. The
orchestrator builds each event exactly once at emission time (or decodes
it during replay) and appends it to the event store; it is never updated.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

KeyGenerator = Callable[[], Any]
TimeSource = Callable[[], str]

RESERVED_META_FIELDS = frozenset({"name", "time"})


class EventMeta(BaseModel):
    """
    Event metadata.

    ``name`` and ``time`` are assigned by the orchestrator. Caller context
    (for example ``actor_id``) is merged in as extra fields, readable as
    attributes.

    Example:
        >>> meta = EventMeta(name="PostCreated", time="t0", actor_id="u1")
        >>> meta.actor_id
        'u1'
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(..., description="Event name, the payload discriminator")
    time: str = Field(..., description="Emission time")

    @property
    def context(self) -> dict[str, Any]:
        """Caller-supplied fields, excluding ``name`` and ``time``."""
        return dict(self.model_extra or {})


class Event(BaseModel):
    """
    An immutable fact appended to the event log.

    Attributes:
        key: Unique event identifier, assigned by the key generator
        data: Event payload; its shape depends on the event name
        meta: Name, time and caller context

    Example:
        >>> event = Event(key="e0", data={"id": "p1"}, meta=EventMeta(name="PostPublished", time="t0"))
        >>> event.name
        'PostPublished'
    """

    model_config = ConfigDict(frozen=True)

    key: Any = Field(..., description="Unique event identifier")
    data: Any = Field(default=None, description="Event payload")
    meta: EventMeta = Field(..., description="Event metadata")

    @property
    def name(self) -> str:
        return self.meta.name

    @property
    def time(self) -> str:
        return self.meta.time

    @property
    def payload(self) -> Any:
        """Alias of ``data``."""
        return self.data

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the event to a JSON-compatible dictionary.

        Context fields are written flat into ``meta`` next to ``name`` and
        ``time``.
        """
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """
        Create an event from a dictionary produced by :meth:`to_dict`.

        Raises:
            pydantic.ValidationError: If required fields are missing
        """
        return cls.model_validate(data)

    def __str__(self) -> str:
        return f"{self.name}(key={self.key})"


def build_event(
    name: str,
    payload: Any = None,
    context: Mapping[str, Any] | BaseModel | None = None,
    *,
    generate_key: KeyGenerator,
    get_time: TimeSource,
) -> Event:
    """
    Build a fully populated event.

    Context fields are merged into the metadata after ``name`` and
    ``time``. A context field with either of those names is dropped and
    logged; it never replaces the system value.

    Args:
        name: Event name
        payload: Event payload
        context: Caller context, e.g. ``{"actor_id": "u1"}``
        generate_key: Produces the event key
        get_time: Produces the event time

    Returns:
        The new event
    """
    if isinstance(context, BaseModel):
        context = context.model_dump()
    context = dict(context or {})

    dropped = sorted(RESERVED_META_FIELDS & context.keys())
    if dropped:
        logger.warning(
            "Dropping context fields %s that would overwrite event metadata",
            dropped,
            extra={"event_name": name, "fields": dropped},
        )
        for field_name in dropped:
            del context[field_name]

    meta = EventMeta(name=name, time=get_time(), **context)
    return Event(key=generate_key(), data=payload, meta=meta)


def sequential_id_generator(prefix: str = "") -> Callable[[], str]:
    """
    Create a generator of sequential identifiers.

    Deterministic keys and times make tests and replays reproducible.

    Example:
        >>> next_key = sequential_id_generator("e")
        >>> next_key(), next_key()
        ('e0', 'e1')
    """
    counter = itertools.count()
    return lambda: f"{prefix}{next(counter)}"


def generate_random_id() -> str:
    """Return a random UUID4 string."""
    return str(uuid4())


def get_current_time() -> str:
    """Return the current UTC time in ISO-8601 format."""
    return datetime.now(UTC).isoformat()


__all__ = [
    "Event",
    "EventMeta",
    "KeyGenerator",
    "TimeSource",
    "build_event",
    "sequential_id_generator",
    "generate_random_id",
    "get_current_time",
]
