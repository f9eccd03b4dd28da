"""Unit tests for NDJSON event files."""

from pathlib import Path

import pytest

from imes.events import EmitResult
from imes.exceptions import SerializationError
from imes.streams import (
    EventFileWriter,
    decode_event,
    encode_event,
    iter_events,
    read_events,
    write_events,
)
from tests.fixtures import create_event, create_post_events


class TestEncoding:
    """Tests for single-line encoding."""

    def test_encode_is_one_compact_line(self) -> None:
        event = create_event("PostCreated", {"id": "p1", "title": "Hello"}, actor_id="u1")

        line = encode_event(event)

        assert "\n" not in line
        assert line == (
            '{"key":"e0","data":{"id":"p1","title":"Hello"},'
            '"meta":{"name":"PostCreated","time":"t0","actor_id":"u1"}}'
        )

    def test_decode(self) -> None:
        event = create_event("PostPublished", {"id": "p1"}, key="e4")
        assert decode_event(encode_event(event)) == event

    def test_invalid_json(self) -> None:
        with pytest.raises(SerializationError, match="line 3") as exc_info:
            decode_event("{not json", line_number=3)
        assert exc_info.value.line == 3

    def test_non_object(self) -> None:
        with pytest.raises(SerializationError, match="expected an object, got list"):
            decode_event("[1, 2]")

    def test_missing_meta(self) -> None:
        with pytest.raises(SerializationError, match="invalid event"):
            decode_event('{"key": "e0", "data": null}')


class TestIterEvents:
    """Tests for line iteration."""

    def test_skips_blank_lines(self) -> None:
        first = create_event("PostCreated", {"id": "p1", "title": "One"}, key="e0")
        second = create_event("PostPublished", {"id": "p1"}, key="e1")
        lines = ["", encode_event(first), "   ", encode_event(second) + "\n"]

        assert list(iter_events(lines)) == [first, second]

    def test_reports_line_number_of_bad_line(self) -> None:
        lines = [encode_event(create_event()), "", "oops"]

        with pytest.raises(SerializationError) as exc_info:
            list(iter_events(lines))

        assert exc_info.value.line == 3


class TestEventFiles:
    """Tests for writing and reading event files."""

    def test_write_then_read(self, tmp_path: Path) -> None:
        path = tmp_path / "events.ndjson"
        events = [
            create_event("PostCreated", {"id": "p1", "title": "One"}, key="e0", actor_id="u1"),
            create_event("PostPublished", {"id": "p1"}, key="e1", actor_id="u2"),
        ]

        assert write_events(path, events) == 2

        assert list(read_events(path)) == events

    def test_writer_appends(self, tmp_path: Path) -> None:
        path = tmp_path / "events.ndjson"
        write_events(path, [create_event(key="e0")])

        with EventFileWriter(path) as writer:
            writer.write(create_event(key="e1"))
            assert writer.count == 1
            assert not writer.closed

        assert writer.closed
        assert [event.key for event in read_events(path)] == ["e0", "e1"]

    def test_writer_opens_lazily(self, tmp_path: Path) -> None:
        path = tmp_path / "events.ndjson"
        writer = EventFileWriter(path)

        assert writer.closed
        assert not path.exists()

        writer.write(create_event())
        writer.close()

        assert path.exists()

    def test_open_returns_the_append_handle(self, tmp_path: Path) -> None:
        writer = EventFileWriter(tmp_path / "events.ndjson")

        handle = writer.open()

        assert writer.open() is handle
        assert not handle.closed
        writer.write(create_event())
        writer.close()
        assert handle.closed
        assert writer.closed

    @pytest.mark.asyncio
    async def test_writer_as_listener_and_replay_source(self, tmp_path: Path) -> None:
        path = tmp_path / "events.ndjson"
        events = create_post_events()

        with EventFileWriter(path) as writer:
            events.on_any(writer.write_result)
            await events.emit("PostCreated", {"id": "p1", "title": "One"}, {"actor_id": "u1"})
            await events.emit("PostPublished", {"id": "p1"}, {"actor_id": "u2"})
            await events.drain()

        replica = create_post_events()
        assert await replica.load(read_events(path)) == 2

        original = await events.projections["posts"].store.get("p1")
        replayed = await replica.projections["posts"].store.get("p1")
        assert replayed == original

    def test_write_result(self, tmp_path: Path) -> None:
        path = tmp_path / "events.ndjson"
        event = create_event()

        with EventFileWriter(path) as writer:
            writer.write_result(EmitResult(event=event))

        assert list(read_events(path)) == [event]
