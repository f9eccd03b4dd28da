"""
Projection items and the updates that produce them.

An item is the current materialized state of one domain object held by a
projection's store. Items are immutable: every handler application
produces a new item that replaces the previous one at the same key.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ItemMeta(BaseModel):
    """
    Bookkeeping fields of a projection item.

    Attributes:
        created_at: Time of the initiating event
        created_by: Actor of the initiating event
        event_keys: Keys of every event that contributed to the item, the
            initiating event first
        updated_at: Time of the latest contributing event
        updated_by: Actor of the latest contributing event
    """

    model_config = ConfigDict(frozen=True)

    created_at: str | None = None
    created_by: Any = None
    event_keys: list[Any] = Field(default_factory=list)
    updated_at: str | None = None
    updated_by: Any = None


class Item(BaseModel):
    """
    One entity held by a projection's store.

    Attributes:
        key: Unique identifier within the store
        data: Domain fields, produced by handler functions
        meta: Bookkeeping fields, produced by the projection's meta
            functions (``ItemMeta`` by default)

    Example:
        >>> post = Item(key="p1", data={"title": "Hello", "published": False}, meta=ItemMeta())
    """

    model_config = ConfigDict(frozen=True)

    key: Any
    data: Any = None
    meta: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class ItemUpdate:
    """
    One item change computed by a projection.

    Attributes:
        current: The item as it will be stored
        previous: The item being replaced, or None for a creation
    """

    current: Item
    previous: Item | None = None

    @property
    def is_creation(self) -> bool:
        return self.previous is None

    @property
    def key(self) -> Any:
        return self.current.key


__all__ = ["Item", "ItemMeta", "ItemUpdate"]
