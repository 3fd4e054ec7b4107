"""Domain models for calendar scheduling."""

from __future__ import annotations

from .enums import (
    CachePolicy,
    ConflictType,
    DuplicatePolicy,
    EventStatus,
    Frequency,
    MissingPolicy,
    ResponseStatus,
    Severity,
    ViewType,
)
from .errors import CalendarError, DuplicateIdError, NotFoundError, ValidationError
from .models import Attendee, ConferenceData, Conflict, ConflictReport, Event, Organizer, RecurrenceRule, Reminder
from .normalize import build_event, normalize_event_data
from .recurrence import expand_occurrences

__all__ = [
    "Attendee",
    "CachePolicy",
    "CalendarError",
    "ConferenceData",
    "Conflict",
    "ConflictReport",
    "ConflictType",
    "DuplicateIdError",
    "DuplicatePolicy",
    "Event",
    "EventStatus",
    "Frequency",
    "MissingPolicy",
    "NotFoundError",
    "Organizer",
    "RecurrenceRule",
    "Reminder",
    "ResponseStatus",
    "Severity",
    "ValidationError",
    "ViewType",
    "build_event",
    "expand_occurrences",
    "normalize_event_data",
]
