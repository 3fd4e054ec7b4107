"""Shared test fixtures for the calendar core tests.

This module provides common fixtures used across all test modules:
- Explicit settings so tests never depend on the environment
- A fresh event store and calendar per test, with a frozen clock
- Sample events modelled on a typical office week

Usage:
    def test_something(store, room_booking):
        store.add_event(room_booking)
        ...
"""

import calendar
from datetime import datetime, timedelta

import pytest

from lightning_calendar.config.settings import (
    AppSettings,
    BusinessHours,
    CacheSettings,
    CalendarSettings,
    ConflictSettings,
    LoggingSettings,
    StoreSettings,
)
from lightning_calendar.data import EventStore
from lightning_calendar.domain import CachePolicy, DuplicatePolicy, MissingPolicy, ViewType
from lightning_calendar.services import Calendar, ConflictDetector


# ─────────────────────────────────────────────────────────────────────────────
# Clock
# ─────────────────────────────────────────────────────────────────────────────

# Wednesday, January 15th 2025.
FIXED_NOW = datetime(2025, 1, 15, 8, 30)


@pytest.fixture
def fixed_clock():
    """Clock callable that always returns ``FIXED_NOW``."""
    return lambda: FIXED_NOW


# ─────────────────────────────────────────────────────────────────────────────
# Settings and core objects
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> AppSettings:
    """Settings equal to the documented defaults."""
    return AppSettings(
        cache=CacheSettings(capacity=128, policy=CachePolicy.LRU),
        store=StoreSettings(duplicate_policy=DuplicatePolicy.REJECT, missing_policy=MissingPolicy.IGNORE),
        calendar=CalendarSettings(
            default_view=ViewType.MONTH,
            week_starts_on=calendar.SUNDAY,
            business_hours=BusinessHours(),
            list_days=30,
            list_step=ViewType.WEEK,
            day_view_business_hours_only=False,
        ),
        conflicts=ConflictSettings(horizon=timedelta(days=30)),
        logging=LoggingSettings(level="INFO"),
    )


@pytest.fixture
def store(settings) -> EventStore:
    return EventStore(settings=settings)


@pytest.fixture
def detector(store, settings) -> ConflictDetector:
    return ConflictDetector(store, horizon=settings.conflicts.horizon)


@pytest.fixture
def cal(settings, fixed_clock) -> Calendar:
    return Calendar(settings=settings, clock=fixed_clock, date=FIXED_NOW.date())


# ─────────────────────────────────────────────────────────────────────────────
# Sample events
# ─────────────────────────────────────────────────────────────────────────────

ROOM_R = {"name": "Conference Room R", "email": "room-r@company.com", "resource": True}


@pytest.fixture
def room_booking() -> dict:
    """Workshop holding room R from 14:00 to 16:00."""
    return {
        "id": "A",
        "title": "Product Workshop",
        "start": datetime(2025, 1, 15, 14, 0),
        "end": datetime(2025, 1, 15, 16, 0),
        "location": "Conference Room R",
        "attendees": [{"name": "Product Team", "email": "product@company.com"}, dict(ROOM_R)],
        "categories": ["workshop"],
        "status": "confirmed",
    }


@pytest.fixture
def clashing_booking() -> dict:
    """Client presentation in room R from 15:00 to 17:00, clashing with ``room_booking``."""
    return {
        "id": "B",
        "title": "Client Presentation",
        "start": datetime(2025, 1, 15, 15, 0),
        "end": datetime(2025, 1, 15, 17, 0),
        "location": "Conference Room R",
        "attendees": [{"name": "Sales Team", "email": "sales@company.com"}, dict(ROOM_R)],
        "category": "client",
        "status": "confirmed",
    }


@pytest.fixture
def weekday_standup() -> dict:
    """Daily 09:00-09:15 standup on weekdays, first held Monday January 6th 2025."""
    return {
        "id": "standup",
        "title": "Daily Standup",
        "start": datetime(2025, 1, 6, 9, 0),
        "end": datetime(2025, 1, 6, 9, 15),
        "recurring": True,
        "recurrenceRule": {"freq": "DAILY", "byDay": ["MO", "TU", "WE", "TH", "FR"]},
        "attendees": [{"name": "Dev Team", "email": "dev-team@company.com", "responseStatus": "accepted"}],
        "categories": ["recurring", "team"],
    }


def make_event(event_id: str, start: datetime, minutes: int = 60, **extra) -> dict:
    """Minimal valid event payload."""
    payload = {
        "id": event_id,
        "title": extra.pop("title", f"Event {event_id}"),
        "start": start,
        "end": start + timedelta(minutes=minutes),
    }
    payload.update(extra)
    return payload
