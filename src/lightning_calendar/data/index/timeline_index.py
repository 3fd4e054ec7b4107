from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from ...domain import Event


def _date_range(start: date, end: date) -> Iterable[date]:
    delta = (end - start).days
    for index in range(delta + 1):
        yield start + timedelta(days=index)


def _bucket(moment: datetime) -> date:
    """Bucket key: the UTC date for aware instants, the wall date for naive ones."""

    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).date()
    return moment.date()


def _covered_days(event: Event) -> Iterable[date]:
    start, end = event.span
    last = _bucket(end - timedelta(microseconds=1)) if end > start else _bucket(start)
    return _date_range(_bucket(start), last)


@dataclass
class TimelineIndex:
    """Canonical event collection with a per-day index for range lookups.

    Recurring templates are kept apart: their occurrences are unbounded, so
    every range lookup returns them as candidates for expansion.
    """

    events_by_id: Dict[str, Event] = field(default_factory=dict)
    days_index: Dict[date, List[str]] = field(default_factory=dict)
    recurring_ids: Dict[str, None] = field(default_factory=dict)

    def _index_event(self, event: Event) -> None:
        if event.recurring:
            self.recurring_ids[event.id] = None
            return
        for day in _covered_days(event):
            self.days_index.setdefault(day, []).append(event.id)

    def _unindex_event(self, event: Event) -> None:
        if event.recurring:
            self.recurring_ids.pop(event.id, None)
            return
        for day in _covered_days(event):
            ids = self.days_index.get(day, [])
            if event.id in ids:
                ids.remove(event.id)
            if not ids:
                self.days_index.pop(day, None)

    def upsert(self, event: Event) -> Optional[Event]:
        """Store ``event`` and return the event it replaced, if any. Replacements keep their position."""

        previous = self.events_by_id.get(event.id)
        if previous is not None:
            self._unindex_event(previous)
        self.events_by_id[event.id] = event
        self._index_event(event)
        return previous

    def remove(self, event_id: str) -> Optional[Event]:
        event = self.events_by_id.pop(event_id, None)
        if event is not None:
            self._unindex_event(event)
        return event

    def get(self, event_id: str) -> Optional[Event]:
        return self.events_by_id.get(event_id)

    def all(self) -> List[Event]:
        return list(self.events_by_id.values())

    def candidates_between(self, start: datetime, end: datetime) -> List[Event]:
        """Events that may intersect ``[start, end]``: day-bucket hits plus every recurring template."""

        if end < start:
            return []
        first, last = _bucket(start), _bucket(end)
        if (last - first).days + 1 > len(self.days_index):
            days = sorted(day for day in self.days_index if first <= day <= last)
        else:
            days = _date_range(first, last)

        seen: set[str] = set()
        collected: list[Event] = []
        for day in days:
            for event_id in self.days_index.get(day, []):
                if event_id in seen:
                    continue
                seen.add(event_id)
                collected.append(self.events_by_id[event_id])
        collected.extend(self.events_by_id[event_id] for event_id in self.recurring_ids)
        return collected

    @property
    def recurring_count(self) -> int:
        return len(self.recurring_ids)

    def __len__(self) -> int:
        return len(self.events_by_id)

    def clear(self) -> None:
        self.events_by_id.clear()
        self.days_index.clear()
        self.recurring_ids.clear()
