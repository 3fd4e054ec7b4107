"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    BusinessHours,
    CacheSettings,
    CalendarSettings,
    ConflictSettings,
    StoreSettings,
    get_settings,
    parse_weekday,
)

__all__ = [
    "AppSettings",
    "BusinessHours",
    "CacheSettings",
    "CalendarSettings",
    "ConflictSettings",
    "StoreSettings",
    "get_settings",
    "parse_weekday",
]
