from __future__ import annotations

import logging
from calendar import monthrange
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..config import AppSettings, BusinessHours, get_settings, parse_weekday
from ..data import EventStore
from ..domain import (
    CachePolicy,
    ConflictReport,
    DuplicatePolicy,
    Event,
    MissingPolicy,
    ViewType,
    build_event,
)
from ..domain.models import parse_datetime
from ..domain.normalize import EventData
from .conflicts import ConflictDetector
from .notifications import Handler, Notification, NotificationRegistry
from .views import ViewContext, build_view_data, visible_range

logger = logging.getLogger(__name__)

_NAVIGABLE_LIST_STEPS = (ViewType.DAY, ViewType.WEEK)


def _as_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_datetime(value).date()


def _shift_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


class Calendar:
    """View and navigation state over one owned :class:`EventStore`.

    Navigation only moves the anchor date; view data is computed on demand by
    :meth:`get_view_data`. Mutations go through the store and are then
    announced to subscribers registered with :meth:`on`.
    """

    def __init__(
        self,
        *,
        view: Union[ViewType, str, None] = None,
        date: Union[date, datetime, str, None] = None,
        week_starts_on: Union[int, str, None] = None,
        business_hours: Union[BusinessHours, Mapping[str, Any], None] = None,
        list_days: Optional[int] = None,
        list_step: Union[ViewType, str, None] = None,
        day_view_business_hours_only: Optional[bool] = None,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
        capacity: Optional[int] = None,
        cache_policy: Optional[CachePolicy] = None,
        duplicate_policy: Optional[DuplicatePolicy] = None,
        missing_policy: Optional[MissingPolicy] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        defaults = self._settings.calendar
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(tz))
        self._view = ViewType(view or defaults.default_view)
        self._date = _as_date(date) if date is not None else self._clock().date()
        self._week_starts_on = defaults.week_starts_on
        self._business_hours = defaults.business_hours
        self._list_days = defaults.list_days
        self._list_step = defaults.list_step
        self._day_view_business_hours_only = defaults.day_view_business_hours_only
        self.configure(
            week_starts_on=week_starts_on,
            business_hours=business_hours,
            list_days=list_days,
            list_step=list_step,
            day_view_business_hours_only=day_view_business_hours_only,
        )

        self._store = EventStore(
            capacity=capacity,
            cache_policy=cache_policy,
            duplicate_policy=duplicate_policy,
            missing_policy=missing_policy,
            settings=self._settings,
        )
        self._conflicts = ConflictDetector(self._store, horizon=self._settings.conflicts.horizon)
        self._notifications = NotificationRegistry()

    # State ---------------------------------------------------------------
    @property
    def event_store(self) -> EventStore:
        return self._store

    @property
    def conflict_detector(self) -> ConflictDetector:
        return self._conflicts

    @property
    def view(self) -> ViewType:
        return self._view

    @property
    def date(self) -> date:
        return self._date

    @property
    def week_starts_on(self) -> int:
        return self._week_starts_on

    @property
    def business_hours(self) -> BusinessHours:
        return self._business_hours

    def configure(
        self,
        *,
        week_starts_on: Union[int, str, None] = None,
        business_hours: Union[BusinessHours, Mapping[str, Any], None] = None,
        list_days: Optional[int] = None,
        list_step: Union[ViewType, str, None] = None,
        day_view_business_hours_only: Optional[bool] = None,
    ) -> None:
        if week_starts_on is not None:
            self._week_starts_on = parse_weekday(week_starts_on)
        if business_hours is not None:
            self._business_hours = BusinessHours.from_value(business_hours)
        if list_days is not None:
            if list_days < 1:
                raise ValueError("list_days must be at least 1")
            self._list_days = list_days
        if list_step is not None:
            step = ViewType(list_step)
            if step not in _NAVIGABLE_LIST_STEPS:
                raise ValueError("list_step must be 'day' or 'week'")
            self._list_step = step
        if day_view_business_hours_only is not None:
            self._day_view_business_hours_only = bool(day_view_business_hours_only)

    def set_view(self, view: Union[ViewType, str]) -> None:
        target = ViewType(view)
        if target is self._view:
            return
        self._view = target
        logger.debug("View changed to %s", target.value)
        self._notifications.emit(Notification.VIEW_CHANGE, target)

    # Navigation ----------------------------------------------------------
    def _step(self, direction: int) -> None:
        unit = self._list_step if self._view is ViewType.LIST else self._view
        if unit is ViewType.MONTH:
            self._date = _shift_months(self._date, direction)
        elif unit is ViewType.WEEK:
            self._date += timedelta(days=7 * direction)
        else:
            self._date += timedelta(days=direction)

    def previous(self) -> date:
        self._step(-1)
        return self._date

    def next(self) -> date:
        self._step(1)
        return self._date

    def today(self) -> date:
        self._date = self._clock().date()
        return self._date

    def go_to_date(self, value: Union[date, datetime, str]) -> date:
        self._date = _as_date(value)
        return self._date

    # View data -----------------------------------------------------------
    def _view_context(self) -> ViewContext:
        return ViewContext(
            anchor=self._date,
            today=self._clock().date(),
            week_starts_on=self._week_starts_on,
            business_hours=self._business_hours,
            list_days=self._list_days,
            day_view_business_hours_only=self._day_view_business_hours_only,
            tz=self._tz,
        )

    def get_date_range(self) -> Tuple[date, date]:
        return visible_range(self._view, self._view_context())

    def get_view_data(self) -> Dict[str, Any]:
        return build_view_data(self._view, self._store, self._view_context())

    # Events --------------------------------------------------------------
    def add_event(self, data: EventData) -> Event:
        event = build_event(data)
        existed = event.id in self._store
        stored = self._store.add_event(event)
        self._notifications.emit(Notification.EVENT_UPDATE if existed else Notification.EVENT_ADD, stored)
        return stored

    def add_events(self, collection: Iterable[EventData]) -> List[Event]:
        known = {event.id for event in self._store.get_all_events()}
        stored = self._store.add_events(collection)
        for event in stored:
            name = Notification.EVENT_UPDATE if event.id in known else Notification.EVENT_ADD
            known.add(event.id)
            self._notifications.emit(name, event)
        return stored

    def update_event(self, event_id: str, changes: Mapping[str, Any]) -> Event:
        updated = self._store.update_event(event_id, changes)
        self._notifications.emit(Notification.EVENT_UPDATE, updated)
        return updated

    def remove_event(self, event_id: str) -> bool:
        event = self._store.get_event(event_id)
        removed = self._store.remove_event(event_id)
        if removed and event is not None:
            self._notifications.emit(Notification.EVENT_REMOVE, event)
        return removed

    def clear(self) -> None:
        events = self._store.get_all_events()
        self._store.clear()
        for event in events:
            self._notifications.emit(Notification.EVENT_REMOVE, event)

    def get_event(self, event_id: str) -> Optional[Event]:
        return self._store.get_event(event_id)

    def get_events(self) -> List[Event]:
        return self._store.get_all_events()

    def get_events_in_range(self, start: Any, end: Any) -> List[Event]:
        return self._store.get_events_in_range(start, end)

    def check_conflicts(self, candidate: EventData) -> ConflictReport:
        return self._conflicts.check_conflicts(candidate)

    def get_stats(self) -> Dict[str, Any]:
        return self._store.get_stats()

    # Subscriptions -------------------------------------------------------
    def on(self, name: Union[Notification, str], handler: Handler) -> Callable[[], None]:
        return self._notifications.subscribe(name, handler)

    def off(self, name: Union[Notification, str], handler: Handler) -> bool:
        return self._notifications.unsubscribe(name, handler)
