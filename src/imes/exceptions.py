"""Library exceptions for the imes package."""

from typing import Any


class ImesError(Exception):
    """Base exception for imes library."""

    pass


class InvalidCursorError(ImesError):
    """
    Raised by ``find`` when the cursor key is not among the filtered items.

    A cursor is only valid together with the filter it was produced under;
    resubmitting it with a different filter may exclude the cursor item.

    Attributes:
        cursor: The cursor key that could not be resolved
    """

    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor
        super().__init__(f"Invalid cursor: {cursor!r}")


class UnknownEventNameError(ImesError):
    """
    Raised when emitting an event name that is not in the payload registry.

    Attributes:
        name: The event name that was emitted
        available_names: Names the registry knows about
    """

    def __init__(self, name: str, available_names: list[str]) -> None:
        self.name = name
        self.available_names = available_names
        available = ", ".join(sorted(available_names)) if available_names else "none"
        super().__init__(f"Unknown event name: '{name}'. Available names: {available}.")


class PayloadValidationError(ImesError):
    """Raised when an event payload does not match its registered model."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Invalid payload for {name}: {message}")


class SerializationError(ImesError):
    """Raised when an event record cannot be decoded."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        location = f" (line {line})" if line is not None else ""
        super().__init__(f"Serialization error{location}: {message}")


class DuplicateEventNameError(ImesError, ValueError):
    """Raised when an event name is registered twice with different payload models."""

    def __init__(self, name: str, existing: type | None, new: type | None) -> None:
        self.name = name
        self.existing = existing
        self.new = new
        existing_name = existing.__name__ if existing is not None else "no model"
        new_name = new.__name__ if new is not None else "no model"
        super().__init__(
            f"Event name '{name}' is already registered to {existing_name}. "
            f"Cannot register {new_name} with the same name."
        )
