"""
Projection engine.

A projection owns one store and a mapping from event names to declarative
handlers. For each event it computes the item creations and updates the
handler calls for, and can write them to its store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from imes.observability import Tracer, create_tracer
from imes.observability.attributes import (
    ATTR_EVENT_KEY,
    ATTR_EVENT_NAME,
    ATTR_HANDLER_KIND,
    ATTR_PROJECTION_NAME,
)
from imes.projections.handlers import (
    HANDLER_TYPES,
    Handler,
    InitHandler,
    SelectManyHandler,
    SelectOneHandler,
)
from imes.projections.items import Item, ItemUpdate
from imes.projections.meta import default_init_meta, default_update_meta
from imes.stores.interface import Query, Store

if TYPE_CHECKING:
    from imes.events.base import Event

logger = logging.getLogger(__name__)

InitMeta = Callable[[Any], Any]
UpdateMeta = Callable[[Any, Any], Any]


class Projection:
    """
    Materialized view kept in sync with the event log.

    Handlers are dispatched by event name. Names without a handler are
    ignored, as are select-one events whose target item does not exist.

    Example:
        >>> posts = Projection(
        ...     "posts",
        ...     InMemoryStore(),
        ...     {
        ...         "PostCreated": InitHandler(
        ...             init=lambda e: {"title": e.data["title"], "published": False},
        ...         ),
        ...         "PostPublished": SelectOneHandler(
        ...             select_one=lambda e: e.data["id"],
        ...             transform=lambda e, data: {**data, "published": True},
        ...         ),
        ...     },
        ... )
        >>> updates = await posts.write_updates(event)

    Note:
        ``get_updates`` reads the store but never writes it, so it can be
        used to preview the effect of an event.
    """

    def __init__(
        self,
        name: str,
        store: Store[Item],
        handlers: Mapping[str, Handler],
        *,
        init_meta: InitMeta = default_init_meta,
        update_meta: UpdateMeta = default_update_meta,
        tracer: Tracer | None = None,
        enable_tracing: bool = False,
    ) -> None:
        """
        Initialize the projection.

        Args:
            name: Projection name, the key of its updates in emit results
            store: Store holding the projection's items
            handlers: Event name to handler mapping
            init_meta: Computes the meta of a created item
            update_meta: Computes the meta of an updated item from the
                event and the current meta
            tracer: Optional custom Tracer instance
            enable_tracing: If True, emit OpenTelemetry spans. Ignored if
                tracer is explicitly provided.

        Raises:
            TypeError: If a handler is not one of the handler variants
        """
        for event_name, handler in handlers.items():
            if not isinstance(handler, HANDLER_TYPES):
                raise TypeError(
                    f"Handler for '{event_name}' in projection '{name}' must be "
                    f"InitHandler, SelectOneHandler or SelectManyHandler, "
                    f"got {type(handler).__name__}"
                )

        self._name = name
        self._store = store
        self._handlers: Mapping[str, Handler] = MappingProxyType(dict(handlers))
        self._init_meta = init_meta
        self._update_meta = update_meta
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @property
    def name(self) -> str:
        return self._name

    @property
    def store(self) -> Store[Item]:
        return self._store

    @property
    def handlers(self) -> Mapping[str, Handler]:
        """Read-only view of the handler mapping."""
        return self._handlers

    def handles(self, event_name: str) -> bool:
        """True if the projection has a handler for ``event_name``."""
        return event_name in self._handlers

    async def get_updates(self, event: Event) -> list[ItemUpdate]:
        """
        Compute the item changes ``event`` causes, without writing them.

        Args:
            event: The event to apply

        Returns:
            One ItemUpdate per created or updated item
        """
        handler = self._handlers.get(event.name)
        if handler is None:
            logger.debug(
                "Projection %s ignores %s",
                self._name,
                event.name,
                extra={"projection": self._name, "event_name": event.name},
            )
            return []

        with self._tracer.span(
            "imes.projection.get_updates",
            {
                ATTR_PROJECTION_NAME: self._name,
                ATTR_EVENT_NAME: event.name,
                ATTR_EVENT_KEY: str(event.key),
                ATTR_HANDLER_KIND: handler.kind,
            },
        ):
            if isinstance(handler, InitHandler):
                return [self._init(handler, event)]
            if isinstance(handler, SelectOneHandler):
                return await self._select_one(handler, event)
            if isinstance(handler, SelectManyHandler):
                return await self._select_many(handler, event)
            raise TypeError(f"Unsupported handler type: {type(handler).__name__}")

    def _init(self, handler: InitHandler, event: Event) -> ItemUpdate:
        item = Item(
            key=handler.item_key(event),
            data=handler.init(event),
            meta=self._init_meta(event),
        )
        return ItemUpdate(current=item)

    def _transform(
        self,
        handler: SelectOneHandler | SelectManyHandler,
        event: Event,
        item: Item,
    ) -> ItemUpdate:
        current = Item(
            key=item.key,
            data=handler.transform(event, item.data),
            meta=self._update_meta(event, item.meta),
        )
        return ItemUpdate(current=current, previous=item)

    async def _select_one(self, handler: SelectOneHandler, event: Event) -> list[ItemUpdate]:
        key = handler.select_one(event)
        item = await self._store.get(key)
        if item is None:
            logger.debug(
                "Projection %s has no item %s for %s",
                self._name,
                key,
                event.name,
                extra={
                    "projection": self._name,
                    "event_name": event.name,
                    "event_key": event.key,
                    "item_key": key,
                },
            )
            return []
        return [self._transform(handler, event, item)]

    async def _select_many(self, handler: SelectManyHandler, event: Event) -> list[ItemUpdate]:
        query: Query | None = handler.query(event)
        updates: list[ItemUpdate] = []

        while query is not None:
            result = await self._store.find(query)
            updates.extend(self._transform(handler, event, item) for item in result.items)
            query = query.with_cursor(result.cursor) if result.has_more else None

        return updates

    async def write_updates(self, event: Event) -> list[ItemUpdate]:
        """
        Compute the item changes for ``event`` and write them to the store.

        Creations go through ``store.create`` and updates through
        ``store.update``; all writes run concurrently.

        Returns:
            The updates that were written
        """
        updates = await self.get_updates(event)
        if not updates:
            return updates

        await asyncio.gather(
            *(
                self._store.create(update.current)
                if update.is_creation
                else self._store.update(update.current)
                for update in updates
            )
        )

        logger.debug(
            "Projection %s wrote %d item(s) for %s",
            self._name,
            len(updates),
            event.name,
            extra={
                "projection": self._name,
                "event_name": event.name,
                "event_key": event.key,
                "update_count": len(updates),
            },
        )
        return updates

    async def handle_event(self, event: Event) -> list[ItemUpdate]:
        """Apply ``event`` to the projection; same as :meth:`write_updates`."""
        return await self.write_updates(event)

    async def reset(self) -> None:
        """Remove every item from the projection's store."""
        await self._store.clear()
        logger.info(
            "Projection %s reset",
            self._name,
            extra={"projection": self._name},
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, handlers={sorted(self._handlers)})"


__all__ = ["Projection", "InitMeta", "UpdateMeta"]
