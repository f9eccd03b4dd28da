"""
Declarative projection handlers.

A projection maps each event name it cares about to exactly one handler
variant:

- InitHandler: the event creates a new item
- SelectOneHandler: the event updates the item at one key
- SelectManyHandler: the event updates every item matching a query

Handler functions are plain synchronous callables receiving the event
(and, for transforms, the current item data).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from imes.stores.interface import Query

if TYPE_CHECKING:
    from imes.events.base import Event


def payload_id(event: Event) -> Any:
    """
    Return the ``id`` field of the event payload.

    Falls back to the event key when the payload has no ``id``.
    """
    data = event.data
    if isinstance(data, Mapping):
        value = data.get("id")
    else:
        value = getattr(data, "id", None)
    return value if value is not None else event.key


@dataclass(frozen=True)
class InitHandler:
    """
    Handler for events that create an item.

    Attributes:
        init: Computes the item data from the event
        key: Computes the item key; defaults to the payload ``id``

    Example:
        >>> InitHandler(init=lambda event: {"title": event.data["title"], "published": False})
    """

    kind: ClassVar[str] = "init"

    init: Callable[[Event], Any]
    key: Callable[[Event], Any] | None = None

    def item_key(self, event: Event) -> Any:
        if self.key is not None:
            return self.key(event)
        return payload_id(event)


@dataclass(frozen=True)
class SelectOneHandler:
    """
    Handler for events that update a single existing item.

    If the store has no item at the selected key, the event is ignored.

    Attributes:
        select_one: Computes the key of the target item
        transform: Computes new item data from the event and current data
    """

    kind: ClassVar[str] = "select_one"

    select_one: Callable[[Event], Any]
    transform: Callable[[Event, Any], Any]


@dataclass(frozen=True)
class SelectManyHandler:
    """
    Handler for events that update every item matching a query.

    ``select_many`` returns a :class:`Query`; a bare filter is accepted
    and wrapped in one. Every page of matches is transformed, each item
    independently.

    Example:
        >>> SelectManyHandler(
        ...     select_many=lambda event: Query(filter={"published": EqualFilter(eq=False)}),
        ...     transform=lambda event, data: {**data, "published": True},
        ... )
    """

    kind: ClassVar[str] = "select_many"

    select_many: Callable[[Event], Any]
    transform: Callable[[Event, Any], Any]

    def query(self, event: Event) -> Query:
        selected = self.select_many(event)
        if isinstance(selected, Query):
            return selected
        return Query(filter=selected)


Handler = InitHandler | SelectOneHandler | SelectManyHandler

HANDLER_TYPES = (InitHandler, SelectOneHandler, SelectManyHandler)


__all__ = [
    "Handler",
    "HANDLER_TYPES",
    "InitHandler",
    "SelectOneHandler",
    "SelectManyHandler",
    "payload_id",
]
