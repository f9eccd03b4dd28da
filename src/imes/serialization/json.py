"""
JSON serialization utilities for imes types.

Events and items are pydantic models whose payloads may carry UUIDs or
datetimes. These helpers serialize such values consistently; the same
encoding is used for canonical store keys and for newline-delimited event
files.

Example:
    >>> from imes.serialization import json_dumps, json_loads
    >>> from uuid import uuid4
    >>>
    >>> json_str = json_dumps({"id": uuid4()})
    >>> parsed = json_loads(json_str)
"""

import json
from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class ImesJSONEncoder(json.JSONEncoder):
    """
    JSON encoder that handles UUIDs, datetimes and pydantic models.

    - UUID objects: string representation
    - datetime/date objects: ISO 8601 string
    - pydantic models: ``model_dump(mode="json")``
    - sets and frozensets: sorted lists, so encodings are stable
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime | date):
            return obj.isoformat()
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        if isinstance(obj, set | frozenset):
            return sorted(obj, key=repr)
        return super().default(obj)


def json_dumps(obj: Any, *, sort_keys: bool = False) -> str:
    """
    Serialize an object to a compact JSON string.

    Args:
        obj: Object to serialize
        sort_keys: Sort mapping keys at every nesting level

    Returns:
        JSON string representation
    """
    return json.dumps(obj, cls=ImesJSONEncoder, sort_keys=sort_keys, separators=(",", ":"))


def json_loads(s: str) -> Any:
    """
    Deserialize a JSON string.

    UUID and datetime strings are NOT converted back to their original
    types; pydantic validation on the receiving model does that.
    """
    return json.loads(s)


__all__ = [
    "ImesJSONEncoder",
    "json_dumps",
    "json_loads",
]
