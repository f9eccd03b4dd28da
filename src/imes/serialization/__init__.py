"""
Serialization utilities for imes.

Example:
    >>> from imes.serialization import json_dumps
    >>> json_dumps({"b": 2, "a": 1}, sort_keys=True)
    '{"a":1,"b":2}'
"""

from imes.serialization.json import (
    ImesJSONEncoder,
    json_dumps,
    json_loads,
)

__all__ = [
    "ImesJSONEncoder",
    "json_dumps",
    "json_loads",
]
