from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..config import AppSettings, get_settings
from ..domain import (
    CachePolicy,
    DuplicateIdError,
    DuplicatePolicy,
    Event,
    MissingPolicy,
    NotFoundError,
    ValidationError,
    build_event,
    expand_occurrences,
)
from ..domain.models import parse_datetime
from ..domain.normalize import EventData
from ..domain.recurrence import series_end
from .cache.query_cache import QueryCache
from .index.timeline_index import TimelineIndex

logger = logging.getLogger(__name__)

RangeKey = Tuple[datetime, datetime]
Span = Tuple[datetime, Optional[datetime]]

_FIELD_ALIASES = {
    "allDay": "all_day",
    "recurrenceRule": "recurrence_rule",
    "conferenceData": "conference_data",
}


def _range_bound(value: Any, *, upper: bool) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if upper else time.min)
    try:
        return parse_datetime(value)
    except ValueError as exc:
        raise ValidationError(str(exc), errors=[{"field": "end" if upper else "start", "message": str(exc)}]) from exc


def _affected_span(event: Event) -> Span:
    if event.recurring:
        return event.span[0], series_end(event)
    return event.span


def _intersects(key: RangeKey, spans: List[Span]) -> bool:
    window_start, window_end = key
    for span_start, span_end in spans:
        if span_start <= window_end and (span_end is None or span_end >= window_start):
            return True
    return False


class EventStore:
    """Owner of the canonical event collection, its timeline index and its range-query cache.

    Every public method takes the store lock, so mutations are exclusive and
    a read never observes a cache entry computed before a completed mutation.
    """

    def __init__(
        self,
        *,
        capacity: Optional[int] = None,
        cache_policy: Optional[CachePolicy] = None,
        duplicate_policy: Optional[DuplicatePolicy] = None,
        missing_policy: Optional[MissingPolicy] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.duplicate_policy = DuplicatePolicy(duplicate_policy or settings.store.duplicate_policy)
        self.missing_policy = MissingPolicy(missing_policy or settings.store.missing_policy)
        self._index = TimelineIndex()
        self._cache: QueryCache[RangeKey, Tuple[Event, ...]] = QueryCache(
            capacity=capacity or settings.cache.capacity,
            policy=cache_policy or settings.cache.policy,
        )
        self._lock = threading.RLock()

    @property
    def cache(self) -> QueryCache[RangeKey, Tuple[Event, ...]]:
        return self._cache

    # Mutations -----------------------------------------------------------
    def add_event(self, data: EventData) -> Event:
        event = build_event(data)
        with self._lock:
            if event.id in self._index.events_by_id and self.duplicate_policy is DuplicatePolicy.REJECT:
                logger.warning("Rejected duplicate event id %s", event.id)
                raise DuplicateIdError(event.id)
            previous = self._index.upsert(event)
            self._invalidate([event] if previous is None else [previous, event])
        logger.debug("Stored event %s (%s)", event.id, "replaced" if previous else "new")
        return event

    def add_events(self, collection: Iterable[EventData]) -> List[Event]:
        """Add a batch atomically: either every item is stored or none is."""

        events: list[Event] = []
        errors: list[Dict[str, Any]] = []
        for index, item in enumerate(collection):
            try:
                events.append(build_event(item, index=index))
            except ValidationError as exc:
                errors.extend(exc.errors or [{"index": index, "field": "event", "message": str(exc)}])

        with self._lock:
            if self.duplicate_policy is DuplicatePolicy.REJECT:
                seen: set[str] = set()
                for index, event in enumerate(events):
                    if event.id in seen or event.id in self._index.events_by_id:
                        errors.append({"index": index, "field": "id", "message": "duplicate id"})
                    seen.add(event.id)
            if errors:
                logger.warning("Rejected batch of %d events with %d errors", len(events), len(errors))
                raise ValidationError(f"Batch rejected: {len(errors)} invalid item(s)", errors=errors)

            touched: list[Event] = []
            for event in events:
                previous = self._index.upsert(event)
                if previous is not None:
                    touched.append(previous)
                touched.append(event)
            self._invalidate(touched)
        logger.debug("Stored batch of %d events", len(events))
        return events

    def update_event(self, event_id: str, changes: Mapping[str, Any]) -> Event:
        with self._lock:
            current = self._index.get(event_id)
            if current is None:
                raise NotFoundError(event_id)
            record = current.to_record()
            if "category" in changes or "categories" in changes:
                record.pop("categories")
            record.update({_FIELD_ALIASES.get(key, key): value for key, value in changes.items()})
            record["id"] = event_id
            updated = build_event(record)
            self._index.upsert(updated)
            self._invalidate([current, updated])
        logger.debug("Updated event %s", event_id)
        return updated

    def remove_event(self, event_id: str) -> bool:
        with self._lock:
            removed = self._index.remove(event_id)
            if removed is None:
                if self.missing_policy is MissingPolicy.RAISE:
                    raise NotFoundError(event_id)
                logger.debug("Remove ignored for unknown event %s", event_id)
                return False
            self._invalidate([removed])
        logger.debug("Removed event %s", event_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._index.clear()
            self._cache.clear(reset_stats=True)
        logger.debug("Event store cleared")

    def _invalidate(self, events: List[Event]) -> None:
        spans = [_affected_span(event) for event in events]
        dropped = self._cache.invalidate(lambda key: _intersects(key, spans))
        if dropped:
            logger.debug("Invalidated %d cached range queries", dropped)

    # Queries -------------------------------------------------------------
    def get_event(self, event_id: str) -> Optional[Event]:
        with self._lock:
            return self._index.get(event_id)

    def require_event(self, event_id: str) -> Event:
        event = self.get_event(event_id)
        if event is None:
            raise NotFoundError(event_id)
        return event

    def get_all_events(self) -> List[Event]:
        with self._lock:
            return self._index.all()

    def get_events_in_range(self, start: Any, end: Any) -> List[Event]:
        window_start = _range_bound(start, upper=False)
        window_end = _range_bound(end, upper=True)
        if window_start > window_end:
            raise ValidationError(
                "Range start must not be after range end",
                errors=[{"field": "start", "message": "must not be after end"}],
            )
        key = (window_start, window_end)
        with self._lock:
            cached = self._cache.lookup(key)
            if cached is not None:
                return list(cached)
            results: list[Event] = []
            for candidate in self._index.candidates_between(window_start, window_end):
                results.extend(expand_occurrences(candidate, window_start, window_end))
            results.sort(key=lambda event: (event.start, event.id))
            self._cache.store(key, tuple(results))
        return results

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            recurring = self._index.recurring_count
            total = len(self._index)
            return {
                "total_events": total,
                "by_recurring": {"recurring": recurring, "non_recurring": total - recurring},
                "cache": self._cache.to_dict(),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def __contains__(self, event_id: object) -> bool:
        with self._lock:
            return event_id in self._index.events_by_id
