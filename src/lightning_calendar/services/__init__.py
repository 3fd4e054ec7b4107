"""Application services: conflict analysis, view synthesis and the calendar facade."""

from __future__ import annotations

from .calendar import Calendar
from .conflicts import ConflictDetector
from .notifications import Notification, NotificationRegistry

__all__ = ["Calendar", "ConflictDetector", "Notification", "NotificationRegistry"]
