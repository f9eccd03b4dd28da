"""
Tracers for stores, projections and the events orchestrator.

Every traced component takes an optional ``tracer`` and otherwise builds
one with :func:`create_tracer`. Operations run inside ``tracer.span(...)``
and may set result attributes on the yielded span, which is None when
tracing is off:

    with self._tracer.span("imes.store.find", {ATTR_QUERY_LIMIT: 10}) as span:
        result = ...
        if span:
            span.set_attribute(ATTR_RESULT_COUNT, len(result.items))

Three implementations are provided. ``NullTracer`` does nothing,
``OpenTelemetryTracer`` delegates to the OpenTelemetry API (spans are
exported only when the application installs an SDK provider), and
``MockTracer`` keeps every span in memory for test assertions.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from opentelemetry import trace


@runtime_checkable
class Tracer(Protocol):
    """Anything that can open a span around an operation."""

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Any]:
        """
        Open a span named ``name`` with its starting attributes.

        The context manager yields an object with ``set_attribute``, or
        None if spans are not recorded.
        """
        ...

    @property
    def enabled(self) -> bool:
        ...


class NullTracer:
    """Tracer used when tracing is disabled; every span yields None."""

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Iterator[None]:
        yield None

    @property
    def enabled(self) -> bool:
        return False


class OpenTelemetryTracer:
    """
    Tracer backed by ``opentelemetry.trace``.

    Spans become children of the current span, so an ``imes.store.find``
    issued while emitting nests under ``imes.events.emit``. Exceptions
    leaving a span are recorded on it and re-raised.

    Args:
        tracer_name: Instrumentation scope, normally the module ``__name__``
    """

    def __init__(self, tracer_name: str) -> None:
        self._tracer = trace.get_tracer(tracer_name)

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[trace.Span]:
        return self._tracer.start_as_current_span(name, attributes=attributes or {})

    @property
    def enabled(self) -> bool:
        return True


class RecordedSpan:
    """
    A span kept by :class:`MockTracer`.

    ``attributes`` starts as a copy of the attributes the span was opened
    with; ``set_attribute`` adds to it.
    """

    def __init__(self, name: str, attributes: dict[str, Any] | None) -> None:
        self.name = name
        self.attributes: dict[str, Any] = dict(attributes or {})
        self.finished = False

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def __repr__(self) -> str:
        return f"RecordedSpan({self.name!r}, {self.attributes!r})"


class MockTracer:
    """
    Tracer for tests.

    ``spans`` holds ``(name, opening attributes)`` pairs in the order the
    spans were opened; ``recorded`` holds the spans themselves, including
    attributes set while they were open.

    Example:
        >>> tracer = MockTracer()
        >>> store = InMemoryStore(tracer=tracer)
        >>> await store.find(Query(limit=10))
        >>> tracer.span_names
        ['imes.store.find']
        >>> tracer.get_span("imes.store.find").attributes["imes.result.count"]
        0
    """

    def __init__(self) -> None:
        self.spans: list[tuple[str, dict[str, Any] | None]] = []
        self.recorded: list[RecordedSpan] = []

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Iterator[RecordedSpan]:
        recorded = RecordedSpan(name, attributes)
        self.spans.append((name, attributes))
        self.recorded.append(recorded)
        try:
            yield recorded
        finally:
            recorded.finished = True

    @property
    def enabled(self) -> bool:
        return True

    @property
    def span_names(self) -> list[str]:
        return [name for name, _ in self.spans]

    def get_span(self, name: str) -> RecordedSpan:
        """
        Return the first span opened with ``name``.

        Raises:
            KeyError: If no such span was opened
        """
        for recorded in self.recorded:
            if recorded.name == name:
                return recorded
        raise KeyError(f"No span named {name!r}; opened spans: {self.span_names}")

    def clear(self) -> None:
        self.spans.clear()
        self.recorded.clear()


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    """
    Build the tracer a component uses when none is injected.

    Components call it as
    ``self._tracer = tracer or create_tracer(__name__, enable_tracing)``.

    Returns:
        OpenTelemetryTracer when ``enable_tracing`` is True, otherwise NullTracer
    """
    if enable_tracing:
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "RecordedSpan",
    "MockTracer",
    "create_tracer",
]
