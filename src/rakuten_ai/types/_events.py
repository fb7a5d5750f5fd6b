"""Base class for events surfaced to callers."""

from typing import Any


class TypedEvent(dict):
    """Base class for all typed events.

    Events are dictionaries so they serialize directly to JSON, with properties layered on top for typed access.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize the typed event with optional data.

        Args:
            data: Optional dictionary of event data to initialize with.
        """
        super().__init__(data or {})

    @property
    def is_terminal(self) -> bool:
        """True if no further events follow this one for the same request."""
        return False

    def as_dict(self) -> dict:
        """Convert this event to a raw dictionary."""
        return {**self}
