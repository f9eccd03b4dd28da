"""
Events orchestrator.

``Events`` is the single entry point for writing: it builds each event,
appends it to the event store and applies it to every registered
projection before returning. Listeners are notified afterwards in a
background task so that their failures never reach the emitter.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections import defaultdict
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel

from imes.config import EventsConfig
from imes.events.base import (
    Event,
    KeyGenerator,
    TimeSource,
    build_event,
    generate_random_id,
    get_current_time,
)
from imes.events.registry import PayloadRegistry
from imes.observability import Tracer, create_tracer
from imes.observability.attributes import (
    ATTR_ACTOR_ID,
    ATTR_EVENT_COUNT,
    ATTR_EVENT_KEY,
    ATTR_EVENT_NAME,
    ATTR_PROJECTION_COUNT,
    ATTR_UPDATE_COUNT,
)
from imes.projections import Item, ItemUpdate, Projection
from imes.stores.interface import Query, Store

logger = logging.getLogger(__name__)

EventRecord = Event | Mapping[str, Any]


@dataclass(frozen=True)
class EmitResult:
    """
    Outcome of emitting one event.

    Attributes:
        event: The stored event
        updates: Projection name to the item changes the event caused
    """

    event: Event
    updates: dict[str, list[ItemUpdate]] = field(default_factory=dict)

    def items(self, projection: str) -> list[Item]:
        """Current state of every item ``projection`` created or updated."""
        return [update.current for update in self.updates.get(projection, [])]

    @property
    def update_count(self) -> int:
        return sum(len(updates) for updates in self.updates.values())


Listener = Callable[[EmitResult], Any]


class Events:
    """
    Emits events, stores them and keeps projections in sync.

    Ordering guarantees:
    - an event is in the event store before any projection sees it
    - ``emit`` returns only after every projection has written its updates
    - ``load`` applies each event to all projections before the next

    Listeners (``post_emit``, ``on``, ``on_any``) receive the
    :class:`EmitResult` after ``emit`` has returned. They may be plain
    functions or coroutine functions; exceptions they raise are logged.

    Example:
        >>> events = Events(
        ...     InMemoryStore(),
        ...     {"posts": posts},
        ...     generate_key=sequential_id_generator("e"),
        ... )
        >>> result = await events.emit(
        ...     "PostCreated",
        ...     {"id": "p1", "title": "Event Sourcing Explained"},
        ...     {"actor_id": "u1"},
        ... )
        >>> result.items("posts")[0].key
        'p1'
    """

    def __init__(
        self,
        store: Store[Event],
        projections: Mapping[str, Projection] | Iterable[Projection] | None = None,
        *,
        generate_key: KeyGenerator = generate_random_id,
        get_time: TimeSource = get_current_time,
        payload_registry: PayloadRegistry | None = None,
        post_emit: Listener | None = None,
        config: EventsConfig | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            store: Event store; events are written with ``create``
            projections: Projections by name, or an iterable of projections
                keyed by their own names
            generate_key: Produces event keys (default random UUID4)
            get_time: Produces event times (default current UTC ISO time)
            payload_registry: Closed set of event names with payload
                models; when None any name and payload is accepted
            post_emit: Callback run after every emit
            config: Behaviour switches (default EventsConfig())
            tracer: Optional custom Tracer instance; when omitted,
                ``config.enable_tracing`` decides
        """
        self._config = config or EventsConfig()
        self._store = store
        self._projections = self._index_projections(projections)
        self._generate_key = generate_key
        self._get_time = get_time
        self._payload_registry = payload_registry
        self._post_emit = post_emit

        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._any_listeners: list[Listener] = []
        self._lock = threading.RLock()
        self._background_tasks: set[asyncio.Task[None]] = set()

        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)

    @staticmethod
    def _index_projections(
        projections: Mapping[str, Projection] | Iterable[Projection] | None,
    ) -> dict[str, Projection]:
        if projections is None:
            return {}
        if isinstance(projections, Mapping):
            return dict(projections)

        indexed: dict[str, Projection] = {}
        for projection in projections:
            if projection.name in indexed:
                raise ValueError(f"Duplicate projection name: '{projection.name}'")
            indexed[projection.name] = projection
        return indexed

    @property
    def store(self) -> Store[Event]:
        """The event store."""
        return self._store

    @property
    def projections(self) -> Mapping[str, Projection]:
        """Read-only view of the registered projections."""
        return MappingProxyType(self._projections)

    @property
    def payload_registry(self) -> PayloadRegistry | None:
        return self._payload_registry

    @property
    def config(self) -> EventsConfig:
        return self._config

    def _build(self, name: str, payload: Any, context: Any) -> Event:
        if self._payload_registry is not None and self._config.validate_payloads:
            payload = self._payload_registry.validate(name, payload)
        elif isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json")
        return build_event(
            name,
            payload,
            context,
            generate_key=self._generate_key,
            get_time=self._get_time,
        )

    async def emit(
        self,
        name: str,
        payload: Any = None,
        context: Mapping[str, Any] | BaseModel | None = None,
    ) -> EmitResult:
        """
        Emit an event.

        Builds the event, appends it to the event store, applies it to
        every projection concurrently and schedules listener
        notification.

        Args:
            name: Event name
            payload: Event payload
            context: Caller context merged into the event meta, e.g.
                ``{"actor_id": "u1"}``

        Returns:
            The stored event and the updates of every projection

        Raises:
            UnknownEventNameError: If a payload registry is configured and
                does not know ``name``
            PayloadValidationError: If the payload does not fit its model
        """
        event = self._build(name, payload, context)

        with self._tracer.span(
            "imes.events.emit",
            {
                ATTR_EVENT_NAME: name,
                ATTR_EVENT_KEY: str(event.key),
                ATTR_ACTOR_ID: str(getattr(event.meta, "actor_id", "")),
                ATTR_PROJECTION_COUNT: len(self._projections),
            },
        ) as span:
            await self._store.create(event)
            updates = await self._apply(event)
            result = EmitResult(event=event, updates=updates)
            if span:
                span.set_attribute(ATTR_UPDATE_COUNT, result.update_count)

        logger.debug(
            "Emitted %s with %d update(s)",
            event,
            result.update_count,
            extra={
                "event_key": event.key,
                "event_name": name,
                "update_count": result.update_count,
            },
        )

        if self._config.notify:
            self._schedule_notification(result)

        return result

    async def preview(
        self,
        name: str,
        payload: Any = None,
        context: Mapping[str, Any] | BaseModel | None = None,
    ) -> EmitResult:
        """
        Compute what emitting an event would change, without writing.

        Neither the event store nor any projection store is modified and
        no listener runs. The preview still draws a key and a time from
        the generators.
        """
        event = self._build(name, payload, context)

        with self._tracer.span(
            "imes.events.preview",
            {ATTR_EVENT_NAME: name, ATTR_PROJECTION_COUNT: len(self._projections)},
        ):
            names = list(self._projections)
            results = await asyncio.gather(
                *(self._projections[n].get_updates(event) for n in names)
            )
        return EmitResult(event=event, updates=dict(zip(names, results)))

    async def _apply(self, event: Event) -> dict[str, list[ItemUpdate]]:
        names = list(self._projections)
        results = await asyncio.gather(
            *(self._projections[n].write_updates(event) for n in names)
        )
        return dict(zip(names, results))

    async def load(
        self,
        events: Iterable[EventRecord] | AsyncIterable[EventRecord],
        *,
        write: bool | None = None,
    ) -> int:
        """
        Replay already-built events into the projections.

        Events are applied in order, each to every projection before the
        next starts. Listeners are not notified.

        Args:
            events: Sync or async iterable of events or event dictionaries
            write: Also append each event to the event store; defaults to
                ``config.write_on_load``

        Returns:
            Number of events applied
        """
        if write is None:
            write = self._config.write_on_load

        count = 0
        with self._tracer.span("imes.events.load", {ATTR_PROJECTION_COUNT: len(self._projections)}) as span:
            async for record in _iterate(events):
                event = record if isinstance(record, Event) else Event.from_dict(record)
                if write:
                    await self._store.create(event)
                await self._apply(event)
                count += 1

                if count % self._config.progress_interval == 0:
                    logger.info(
                        "Replayed %d events",
                        count,
                        extra={"event_count": count, "event_key": event.key},
                    )

            if span:
                span.set_attribute(ATTR_EVENT_COUNT, count)

        logger.info(
            "Loaded %d events into %d projection(s)",
            count,
            len(self._projections),
            extra={"event_count": count, "write": write},
        )
        return count

    async def rebuild(self, *, page_size: int = 100) -> int:
        """
        Reset every projection and replay the event store into them.

        Returns:
            Number of events replayed
        """
        await asyncio.gather(*(p.reset() for p in self._projections.values()))
        return await self.load(self._stored_events(page_size), write=False)

    async def _stored_events(self, page_size: int) -> AsyncIterator[Event]:
        query: Query | None = Query(limit=page_size)
        while query is not None:
            result = await self._store.find(query)
            for event in result.items:
                yield event
            query = query.with_cursor(result.cursor) if result.has_more else None

    def on(self, name: str, listener: Listener) -> None:
        """
        Register a listener for one event name.

        Thread-safe: Can be called from any thread.
        """
        with self._lock:
            self._listeners[name].append(listener)

        logger.info(
            "Registered listener %s for %s",
            _listener_name(listener),
            name,
            extra={"listener": _listener_name(listener), "event_name": name},
        )

    def on_any(self, listener: Listener) -> None:
        """Register a listener for every event name."""
        with self._lock:
            self._any_listeners.append(listener)

        logger.info(
            "Registered listener %s for all events",
            _listener_name(listener),
            extra={"listener": _listener_name(listener)},
        )

    def _schedule_notification(self, result: EmitResult) -> None:
        # listeners registered after emit returns do not see this result
        with self._lock:
            listeners = list(self._listeners.get(result.event.name, []))
            listeners.extend(self._any_listeners)
        if self._post_emit is not None:
            listeners.insert(0, self._post_emit)

        task = asyncio.create_task(self._notify(result, listeners))
        task.add_done_callback(self._on_notification_done)
        self._background_tasks.add(task)

    def _on_notification_done(self, task: asyncio.Task[None]) -> None:
        """Callback when a notification task completes."""
        self._background_tasks.discard(task)

        if not task.cancelled():
            exc = task.exception()
            if exc:
                logger.error(
                    "Notification task failed: %s",
                    exc,
                    exc_info=exc,
                )

    async def _notify(self, result: EmitResult, listeners: list[Listener]) -> None:
        for listener in listeners:
            try:
                outcome = listener(result)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(
                    "Listener %s failed for %s: %s",
                    _listener_name(listener),
                    result.event,
                    e,
                    exc_info=True,
                    extra={
                        "listener": _listener_name(listener),
                        "event_key": result.event.key,
                        "event_name": result.event.name,
                        "error": str(e),
                    },
                )

    async def drain(self) -> None:
        """Wait until every scheduled notification has finished."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    @property
    def pending_notifications(self) -> int:
        return len(self._background_tasks)


async def _iterate(
    events: Iterable[EventRecord] | AsyncIterable[EventRecord],
) -> AsyncIterator[EventRecord]:
    if isinstance(events, AsyncIterable):
        async for record in events:
            yield record
    else:
        for record in events:
            yield record


def _listener_name(listener: Listener) -> str:
    return getattr(listener, "__qualname__", None) or type(listener).__name__


__all__ = ["EmitResult", "Events", "Listener", "EventRecord"]
