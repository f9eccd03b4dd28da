"""
Configuration for the events orchestrator.

This module provides:
- EventsConfig: Behaviour switches for emission, replay and notification
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EventsConfig:
    """
    Configuration for :class:`imes.events.Events`.

    Attributes:
        enable_tracing: Emit OpenTelemetry spans when no tracer is passed
        notify: Run the post-emit callback and listeners after each emit
        write_on_load: Default for ``load(write=...)``; when True, replayed
            events are also appended to the event store
        validate_payloads: Validate payloads through the payload registry
            when one is configured
        progress_interval: Log replay progress every this many events

    Example:
        >>> config = EventsConfig(notify=False)
        >>> events = Events(store, {"posts": posts}, config=config)
    """

    enable_tracing: bool = False
    notify: bool = True
    write_on_load: bool = False
    validate_payloads: bool = True
    progress_interval: int = 1000

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.progress_interval < 1:
            raise ValueError(
                f"progress_interval must be positive, got {self.progress_interval}. "
                "Use a value like 1000 (default) to log replay progress."
            )


__all__ = ["EventsConfig"]
