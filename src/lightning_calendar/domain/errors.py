from __future__ import annotations

from typing import Any, Dict, List, Optional


class CalendarError(Exception):
    """Base class for every failure raised by the calendar core."""


class ValidationError(CalendarError, ValueError):
    """Raised when event data is structurally invalid. Store state is left untouched."""

    def __init__(self, message: str, *, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors: List[Dict[str, Any]] = list(errors or [])


class DuplicateIdError(ValidationError):
    """Raised when adding an event whose id is already stored and the policy rejects duplicates."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            f"Event {event_id} already exists",
            errors=[{"field": "id", "message": "duplicate id"}],
        )
        self.event_id = event_id


class NotFoundError(CalendarError, KeyError):
    """Raised when an event id is unknown and the caller asked for a hard failure."""

    def __init__(self, event_id: str) -> None:
        super().__init__(event_id)
        self.event_id = event_id

    def __str__(self) -> str:
        return f"Event {self.event_id} not found"
