"""Unit tests for PayloadRegistry."""

from uuid import UUID

import pytest
from pydantic import BaseModel

from imes.events import PayloadRegistry
from imes.exceptions import (
    DuplicateEventNameError,
    PayloadValidationError,
    UnknownEventNameError,
)
from tests.fixtures import PostCreated, create_post_registry


class Tagged(BaseModel):
    id: UUID
    tags: list[str] = []


class TestPayloadRegistry:
    """Tests for registration and lookup."""

    def test_register_and_get(self) -> None:
        registry = PayloadRegistry()
        registry.register("PostCreated", PostCreated)

        assert registry.get("PostCreated") is PostCreated
        assert "PostCreated" in registry
        assert len(registry) == 1

    def test_decorator(self) -> None:
        registry = PayloadRegistry()

        @registry.payload("Tagged")
        class TaggedPayload(BaseModel):
            id: str

        assert registry.get("Tagged") is TaggedPayload

    def test_register_without_model(self) -> None:
        registry = PayloadRegistry()
        registry.register("AllPostsPublished")

        assert registry.get("AllPostsPublished") is None

    def test_re_registering_same_model_is_a_noop(self) -> None:
        registry = PayloadRegistry()
        registry.register("PostCreated", PostCreated)
        registry.register("PostCreated", PostCreated)

        assert registry.names == ["PostCreated"]

    def test_duplicate_name_with_different_model(self) -> None:
        registry = PayloadRegistry()
        registry.register("PostCreated", PostCreated)

        with pytest.raises(DuplicateEventNameError, match="already registered to PostCreated"):
            registry.register("PostCreated", Tagged)

    def test_unknown_name_lists_available(self) -> None:
        registry = create_post_registry()

        with pytest.raises(UnknownEventNameError) as exc_info:
            registry.get("PostDeleted")

        assert exc_info.value.name == "PostDeleted"
        assert "AllPostsPublished, PostCreated, PostPublished" in str(exc_info.value)

    def test_names_and_iteration(self) -> None:
        registry = create_post_registry()

        assert registry.names == ["AllPostsPublished", "PostCreated", "PostPublished"]
        assert set(registry) == set(registry.names)

    def test_empty_registry_is_truthy(self) -> None:
        assert PayloadRegistry()

    def test_clear(self) -> None:
        registry = create_post_registry()
        registry.clear()
        assert len(registry) == 0


class TestPayloadValidation:
    """Tests for validate."""

    def test_returns_json_ready_data(self) -> None:
        registry = PayloadRegistry()
        registry.register("Tagged", Tagged)

        data = registry.validate("Tagged", {"id": "12345678-1234-5678-1234-567812345678"})

        assert data == {"id": "12345678-1234-5678-1234-567812345678", "tags": []}

    def test_accepts_model_instances(self) -> None:
        registry = create_post_registry()

        data = registry.validate("PostCreated", PostCreated(id="p1", title="Hello"))

        assert data == {"id": "p1", "title": "Hello"}

    def test_invalid_payload(self) -> None:
        registry = create_post_registry()

        with pytest.raises(PayloadValidationError) as exc_info:
            registry.validate("PostCreated", {"id": "p1"})

        assert exc_info.value.name == "PostCreated"
        assert "title" in str(exc_info.value)

    def test_model_less_names_pass_payload_through(self) -> None:
        registry = create_post_registry()
        assert registry.validate("AllPostsPublished", None) is None

    def test_unknown_name(self) -> None:
        with pytest.raises(UnknownEventNameError):
            create_post_registry().validate("PostDeleted", {})
