"""Lightning Calendar core package."""

from __future__ import annotations

from .data import EventStore
from .domain import (
    CalendarError,
    ConflictReport,
    DuplicateIdError,
    Event,
    NotFoundError,
    ValidationError,
    ViewType,
)
from .logging import configure_logging
from .services import Calendar, ConflictDetector, Notification

__all__ = [
    "Calendar",
    "CalendarError",
    "ConflictDetector",
    "ConflictReport",
    "DuplicateIdError",
    "Event",
    "EventStore",
    "Notification",
    "NotFoundError",
    "ValidationError",
    "ViewType",
    "configure_logging",
]
