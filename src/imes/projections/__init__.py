"""
Projections: declarative handlers that keep read models in sync.

Exports:
- Projection: Handler dispatch, update computation and writing
- InitHandler / SelectOneHandler / SelectManyHandler: Handler variants
- Item / ItemMeta / ItemUpdate: Projection items and changes
- default_init_meta / default_update_meta: Default bookkeeping
"""

from imes.projections.handlers import (
    Handler,
    InitHandler,
    SelectManyHandler,
    SelectOneHandler,
    payload_id,
)
from imes.projections.items import Item, ItemMeta, ItemUpdate
from imes.projections.meta import default_init_meta, default_update_meta, event_actor
from imes.projections.projection import InitMeta, Projection, UpdateMeta

__all__ = [
    "Projection",
    "InitMeta",
    "UpdateMeta",
    "Handler",
    "InitHandler",
    "SelectOneHandler",
    "SelectManyHandler",
    "payload_id",
    "Item",
    "ItemMeta",
    "ItemUpdate",
    "default_init_meta",
    "default_update_meta",
    "event_actor",
]
