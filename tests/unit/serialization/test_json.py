"""
Unit tests for the JSON serialization module.

Tests for:
- ImesJSONEncoder class
- json_dumps convenience function
- json_loads convenience function
"""

import json
from datetime import UTC, date, datetime
from uuid import uuid4

import pytest
from pydantic import BaseModel

from imes.serialization import ImesJSONEncoder, json_dumps, json_loads


class Author(BaseModel):
    name: str
    joined: date


class TestImesJSONEncoder:
    """Tests for ImesJSONEncoder."""

    def test_encodes_uuid(self):
        """Test encoding UUID to string."""
        test_uuid = uuid4()
        assert json_dumps({"id": test_uuid}) == f'{{"id":"{test_uuid}"}}'

    def test_encodes_datetime(self):
        """Test encoding datetime to ISO format string."""
        test_dt = datetime(2024, 1, 15, 10, 30, 45, 123456, tzinfo=UTC)
        assert json_loads(json_dumps({"at": test_dt})) == {"at": "2024-01-15T10:30:45.123456+00:00"}

    def test_encodes_pydantic_models(self):
        result = json_dumps(Author(name="Ada", joined=date(2024, 1, 15)))
        assert json_loads(result) == {"name": "Ada", "joined": "2024-01-15"}

    def test_sets_are_sorted(self):
        assert json_dumps({"tags": {"b", "a", "c"}}) == '{"tags":["a","b","c"]}'

    def test_unknown_types_raise(self):
        with pytest.raises(TypeError):
            json_dumps({"value": object()})

    def test_usable_with_stdlib_dumps(self):
        test_uuid = uuid4()
        assert str(test_uuid) in json.dumps([test_uuid], cls=ImesJSONEncoder)


class TestJsonDumps:
    """Tests for json_dumps."""

    def test_is_compact(self):
        assert json_dumps({"a": [1, 2], "b": None}) == '{"a":[1,2],"b":null}'

    def test_preserves_key_order_by_default(self):
        assert json_dumps({"b": 1, "a": 2}) == '{"b":1,"a":2}'

    def test_sort_keys_applies_at_every_level(self):
        assert json_dumps({"b": {"d": 1, "c": 2}, "a": 3}, sort_keys=True) == (
            '{"a":3,"b":{"c":2,"d":1}}'
        )


class TestJsonLoads:
    """Tests for json_loads."""

    def test_round_trip(self):
        data = {"string": "hello", "number": 42, "boolean": True, "items": [1, "two"]}
        assert json_loads(json_dumps(data)) == data

    def test_strings_are_not_converted(self):
        test_uuid = uuid4()
        assert json_loads(json_dumps({"id": test_uuid})) == {"id": str(test_uuid)}

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            json_loads("{oops")
