from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from ..config import get_settings
from ..data import EventStore
from ..domain import (
    Conflict,
    ConflictReport,
    ConflictType,
    Event,
    EventStatus,
    Severity,
    build_event,
    expand_occurrences,
)
from ..domain.normalize import EventData

logger = logging.getLogger(__name__)


def _overlap(first: Event, second: Event) -> Optional[Tuple[datetime, datetime]]:
    start = max(first.span[0], second.span[0])
    end = min(first.span[1], second.span[1])
    return (start, end) if start < end else None


def _format_window(start: datetime, end: datetime) -> str:
    if start.date() == end.date():
        return f"{start:%Y-%m-%d %H:%M}-{end:%H:%M}"
    return f"{start:%Y-%m-%d %H:%M} to {end:%Y-%m-%d %H:%M}"


def _shared_resources(first: Event, second: Event) -> List[str]:
    theirs = {attendee.identity for attendee in second.resources}
    shared: list[str] = []
    for attendee in first.resources:
        label = attendee.name or attendee.identity
        if attendee.identity in theirs and label not in shared:
            shared.append(label)
    return shared


def _time_severity(first: Event, second: Event, overlap: timedelta) -> Severity:
    shortest = min(first.span[1] - first.span[0], second.span[1] - second.span[0])
    ratio = overlap / shortest if shortest else 1.0
    if ratio >= 1:
        return Severity.HIGH
    if ratio >= 0.5:
        return Severity.MEDIUM
    return Severity.LOW


@dataclass(slots=True)
class ConflictDetector:
    """Stateless overlap analysis of a candidate event against the events held by ``store``."""

    store: EventStore
    horizon: timedelta = field(default_factory=lambda: get_settings().conflicts.horizon)

    def check_conflicts(self, candidate: EventData) -> ConflictReport:
        event = build_event(candidate)
        if event.status is EventStatus.CANCELLED:
            return ConflictReport(event_id=event.id)

        occurrences = self._candidate_occurrences(event)
        if not occurrences:
            return ConflictReport(event_id=event.id)

        window_start = min(occurrence.span[0] for occurrence in occurrences)
        window_end = max(occurrence.span[1] for occurrence in occurrences)
        series = event.series_id or event.id
        existing = [
            other
            for other in self.store.get_events_in_range(window_start, window_end)
            if (other.series_id or other.id) != series and other.status is not EventStatus.CANCELLED
        ]

        conflicts: list[Conflict] = []
        for occurrence in occurrences:
            for other in existing:
                conflict = self._classify(occurrence, other)
                if conflict is not None:
                    conflicts.append(conflict)

        if conflicts:
            logger.debug("Event %s has %d conflict(s)", event.id, len(conflicts))
        return ConflictReport(event_id=event.id, conflicts=tuple(conflicts))

    def find_all_conflicts(self) -> Dict[str, ConflictReport]:
        """Check every stored event; only events with conflicts are returned."""

        reports: dict[str, ConflictReport] = {}
        for event in self.store.get_all_events():
            report = self.check_conflicts(event)
            if report.has_conflicts:
                reports[event.id] = report
        return reports

    def _candidate_occurrences(self, event: Event) -> List[Event]:
        if not event.recurring or event.is_occurrence:
            return [event]
        return expand_occurrences(event, event.start, event.start + self.horizon)

    def _classify(self, candidate: Event, other: Event) -> Optional[Conflict]:
        window = _overlap(candidate, other)
        if window is None:
            return None
        overlap_start, overlap_end = window

        resources = _shared_resources(candidate, other)
        if resources:
            hard = candidate.status is EventStatus.CONFIRMED and other.status is EventStatus.CONFIRMED
            names = ", ".join(resources)
            return Conflict(
                type=ConflictType.RESOURCE,
                description=(
                    f"Overlaps with an existing booking of {names} by '{other.title}' "
                    f"({_format_window(overlap_start, overlap_end)})"
                ),
                severity=Severity.HIGH if hard else Severity.MEDIUM,
                event_id=other.id,
                event_title=other.title,
                overlap_start=overlap_start,
                overlap_end=overlap_end,
                resources=tuple(resources),
            )

        if candidate.all_day or other.all_day:
            return None
        severity = _time_severity(candidate, other, overlap_end - overlap_start)
        kind = "fully overlaps" if severity is Severity.HIGH else "partially overlaps"
        return Conflict(
            type=ConflictType.TIME,
            description=f"{kind.capitalize()} '{other.title}' ({_format_window(overlap_start, overlap_end)})",
            severity=severity,
            event_id=other.id,
            event_title=other.title,
            overlap_start=overlap_start,
            overlap_end=overlap_end,
        )
