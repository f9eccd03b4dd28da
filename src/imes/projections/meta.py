"""Default item metadata functions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from imes.projections.items import ItemMeta

if TYPE_CHECKING:
    from imes.events.base import Event


def event_actor(event: Event) -> Any:
    """Return the ``actor_id`` from the event context, or None."""
    return getattr(event.meta, "actor_id", None)


def default_init_meta(event: Event) -> ItemMeta:
    """Metadata of an item created by ``event``."""
    actor = event_actor(event)
    return ItemMeta(
        created_at=event.time,
        created_by=actor,
        event_keys=[event.key],
        updated_at=event.time,
        updated_by=actor,
    )


def default_update_meta(event: Event, meta: Any) -> Any:
    """
    Metadata of an item updated by ``event``.

    Appends the event key to ``event_keys`` and refreshes ``updated_at``
    and ``updated_by``. Creation fields are kept. Works on ``ItemMeta``
    and on plain mappings produced by a custom ``init_meta``.

    Raises:
        TypeError: If ``meta`` is neither
    """
    changes = {
        "updated_at": event.time,
        "updated_by": event_actor(event),
    }
    if isinstance(meta, ItemMeta):
        return meta.model_copy(update={**changes, "event_keys": [*meta.event_keys, event.key]})
    if isinstance(meta, Mapping):
        return {**meta, **changes, "event_keys": [*meta.get("event_keys", ()), event.key]}
    raise TypeError(f"default_update_meta cannot update meta of type {type(meta).__name__}")


__all__ = ["default_init_meta", "default_update_meta", "event_actor"]
