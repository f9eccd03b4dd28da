"""
Newline-delimited JSON event files.

Each line holds one event as produced by ``Event.to_dict()``. Files are
written append-only and read back in order, which makes them a simple
durable log and a replay source for ``Events.load``.

Example:
    >>> with EventFileWriter("events.ndjson") as writer:
    ...     events.on_any(writer.write_result)
    ...     await events.emit("PostCreated", {"id": "p1", "title": "Hello"})
    ...     await events.drain()
    >>>
    >>> await events.load(read_events("events.ndjson"))
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from os import PathLike
from types import TracebackType
from typing import IO, TYPE_CHECKING, Self

from pydantic import ValidationError

from imes.events.base import Event
from imes.exceptions import SerializationError
from imes.serialization import json_dumps, json_loads

if TYPE_CHECKING:
    from imes.events.orchestrator import EmitResult

logger = logging.getLogger(__name__)

StrPath = str | PathLike[str]


def encode_event(event: Event) -> str:
    """Encode an event as a single JSON line (without the newline)."""
    return json_dumps(event.to_dict())


def decode_event(line: str, line_number: int | None = None) -> Event:
    """
    Decode one JSON line into an event.

    Raises:
        SerializationError: If the line is not valid JSON or not an event
    """
    try:
        record = json_loads(line)
    except json.JSONDecodeError as e:
        raise SerializationError(f"invalid JSON: {e.msg}", line_number) from e

    if not isinstance(record, dict):
        raise SerializationError(
            f"expected an object, got {type(record).__name__}", line_number
        )

    try:
        return Event.from_dict(record)
    except ValidationError as e:
        raise SerializationError(f"invalid event: {e}", line_number) from e


def iter_events(lines: Iterable[str]) -> Iterator[Event]:
    """
    Parse events from an iterable of lines.

    Blank lines are skipped. Line numbers in errors start at 1.

    Raises:
        SerializationError: On the first malformed line
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        yield decode_event(line, line_number)


def read_events(path: StrPath) -> Iterator[Event]:
    """
    Read events from an NDJSON file, lazily and in file order.

    The file stays open until the iterator is exhausted or closed.
    """
    with open(path, encoding="utf-8") as file:
        yield from iter_events(file)


class EventFileWriter:
    """
    Append-only NDJSON event writer.

    The file is opened in append mode on first write (or on entering the
    context manager). Every line is flushed immediately.

    Example:
        >>> with EventFileWriter("events.ndjson") as writer:
        ...     writer.write(event)
    """

    def __init__(self, path: StrPath) -> None:
        self._path = path
        self._file: IO[str] | None = None
        self._count = 0

    @property
    def path(self) -> StrPath:
        return self._path

    @property
    def count(self) -> int:
        """Number of events written by this writer."""
        return self._count

    @property
    def closed(self) -> bool:
        return self._file is None

    def open(self) -> IO[str]:
        """Open the file for appending if needed and return it."""
        if self._file is None:
            self._file = open(self._path, "a", encoding="utf-8")
        return self._file

    def write(self, event: Event) -> None:
        """Append one event."""
        file = self.open()
        file.write(encode_event(event) + "\n")
        file.flush()
        self._count += 1

    def write_many(self, events: Iterable[Event]) -> int:
        """Append several events; returns how many were written."""
        written = 0
        for event in events:
            self.write(event)
            written += 1
        return written

    def write_result(self, result: EmitResult) -> None:
        """Append the event of an emit result; usable as a listener."""
        self.write(result.event)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug(
                "Closed event file %s after %d event(s)",
                self._path,
                self._count,
                extra={"path": str(self._path), "event_count": self._count},
            )

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def write_events(path: StrPath, events: Iterable[Event]) -> int:
    """Append events to an NDJSON file; returns how many were written."""
    with EventFileWriter(path) as writer:
        return writer.write_many(events)


__all__ = [
    "EventFileWriter",
    "decode_event",
    "encode_event",
    "iter_events",
    "read_events",
    "write_events",
]
