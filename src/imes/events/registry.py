"""
Payload registry: the closed set of event names an application emits.

Each name is bound to an optional pydantic model describing its payload.
When the orchestrator is given a registry, emitting an unregistered name
fails and payloads are validated and normalized to JSON-ready data before
the event is built.

Usage:
    registry = PayloadRegistry()

    # Explicit registration
    registry.register("AllPostsPublished")

    # Decorator registration
    @registry.payload("PostCreated")
    class PostCreated(BaseModel):
        id: str
        title: str

    registry.validate("PostCreated", {"id": "p1", "title": "Hello"})
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from imes.exceptions import (
    DuplicateEventNameError,
    PayloadValidationError,
    UnknownEventNameError,
)

logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)


class PayloadRegistry:
    """
    Registry mapping event names to payload models.

    Thread-Safety:
        All operations are thread-safe and use internal locking.

    Example:
        >>> registry = PayloadRegistry()
        >>> registry.register("PostPublished", PostPublished)
        >>> registry.validate("PostPublished", {"id": "p1"})
        {'id': 'p1'}
    """

    def __init__(self) -> None:
        """Initialize an empty payload registry."""
        self._models: dict[str, type[BaseModel] | None] = {}
        self._lock = threading.RLock()

    def register(
        self,
        name: str,
        model: type[TModel] | None = None,
    ) -> type[TModel] | None:
        """
        Register an event name with an optional payload model.

        Args:
            name: Event name
            model: Pydantic model for the payload, or None to accept any
                payload unchanged

        Returns:
            The model (enables use from decorators)

        Raises:
            DuplicateEventNameError: If the name is already registered to
                a different model
        """
        with self._lock:
            if name in self._models:
                existing = self._models[name]
                if existing is not model:
                    raise DuplicateEventNameError(name, existing, model)
                return model

            self._models[name] = model
            logger.debug(
                "Registered event name '%s' -> %s",
                name,
                model.__name__ if model is not None else None,
                extra={
                    "event_name": name,
                    "payload_model": model.__name__ if model is not None else None,
                },
            )
            return model

    def payload(self, name: str) -> Callable[[type[TModel]], type[TModel]]:
        """
        Decorator registering a payload model under ``name``.

        Example:
            >>> @registry.payload("PostCreated")
            ... class PostCreated(BaseModel):
            ...     id: str
            ...     title: str
        """

        def decorator(model: type[TModel]) -> type[TModel]:
            self.register(name, model)
            return model

        return decorator

    def get(self, name: str) -> type[BaseModel] | None:
        """
        Get the payload model for a name.

        Raises:
            UnknownEventNameError: If the name is not registered
        """
        with self._lock:
            if name not in self._models:
                raise UnknownEventNameError(name, list(self._models))
            return self._models[name]

    def validate(self, name: str, payload: Any) -> Any:
        """
        Validate a payload against the model registered for ``name``.

        Payloads are returned as JSON-compatible data so that stored
        events and replayed events look the same. Names registered without
        a model return the payload unchanged.

        Raises:
            UnknownEventNameError: If the name is not registered
            PayloadValidationError: If the payload does not fit the model
        """
        model = self.get(name)
        if model is None:
            return payload

        if isinstance(payload, model):
            return payload.model_dump(mode="json")

        try:
            return model.model_validate(payload).model_dump(mode="json")
        except ValidationError as e:
            raise PayloadValidationError(name, str(e)) from e

    @property
    def names(self) -> list[str]:
        """Sorted list of registered event names."""
        with self._lock:
            return sorted(self._models)

    def clear(self) -> None:
        """Remove every registration."""
        with self._lock:
            self._models.clear()
            logger.debug("Payload registry cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._models

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._models))

    def __bool__(self) -> bool:
        """Registry is always truthy, even when empty."""
        return True


__all__ = ["PayloadRegistry"]
