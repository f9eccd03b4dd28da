"""Unit tests for the imes.testing doubles."""

import asyncio

import pytest

from imes.events import EmitResult
from imes.projections import ItemUpdate
from imes.stores import InMemoryStore
from imes.testing import MockProjection, RecordingListener
from tests.fixtures import create_event, make_post


class TestMockProjection:
    """Tests for MockProjection."""

    @pytest.mark.asyncio
    async def test_returns_canned_updates_in_order(self) -> None:
        first = ItemUpdate(current=make_post("p1", "One"))
        second = ItemUpdate(current=make_post("p2", "Two"))
        projection = MockProjection(
            "posts", InMemoryStore(), {"PostCreated": [[first], [second]]}
        )

        assert await projection.get_updates(create_event(key="e0")) == [first]
        assert await projection.get_updates(create_event(key="e1")) == [second]
        assert await projection.get_updates(create_event(key="e2")) == []
        assert [event.key for event in projection.events] == ["e0", "e1", "e2"]

    @pytest.mark.asyncio
    async def test_unknown_names_yield_nothing(self) -> None:
        projection = MockProjection("posts", InMemoryStore())

        assert await projection.get_updates(create_event("PostPublished")) == []
        assert not projection.handles("PostPublished")

    @pytest.mark.asyncio
    async def test_canned_updates_are_written(self) -> None:
        post = make_post("p1", "One")
        store = InMemoryStore()
        projection = MockProjection("posts", store, {"PostCreated": [[ItemUpdate(current=post)]]})

        await projection.handle_event(create_event())

        assert await store.get("p1") == post


class TestRecordingListener:
    """Tests for RecordingListener."""

    @pytest.mark.asyncio
    async def test_records_and_wakes_waiters(self) -> None:
        listener = RecordingListener()
        result = EmitResult(event=create_event("PostPublished"))

        waiter = asyncio.create_task(listener.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        listener(result)
        await asyncio.wait_for(waiter, timeout=1)

        assert listener.results == [result]
        assert listener.event_names == ["PostPublished"]

    def test_clear(self) -> None:
        listener = RecordingListener()
        listener(EmitResult(event=create_event()))

        listener.clear()

        assert listener.results == []
