"""Per-view data synthesis for the calendar view engine.

Every builder is a plain function of the store, the anchor date and the
calendar configuration; nothing here holds state between calls.
"""

from __future__ import annotations

from calendar import day_name, month_name, monthrange
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..config import BusinessHours
from ..data import EventStore
from ..domain import Event, ViewType


@dataclass(frozen=True)
class ViewContext:
    anchor: date
    today: date
    week_starts_on: int
    business_hours: BusinessHours
    list_days: int
    day_view_business_hours_only: bool = False
    tz: Optional[tzinfo] = None


def _date_range(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_start(day: date, week_starts_on: int) -> date:
    return day - timedelta(days=(day.weekday() - week_starts_on) % 7)


def day_window(day: date, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    return datetime.combine(day, time.min, tzinfo=tz), datetime.combine(day, time.max, tzinfo=tz)


def visible_range(view: ViewType, context: ViewContext) -> Tuple[date, date]:
    """First and last date shown by ``view`` around the anchor."""

    anchor = context.anchor
    if view is ViewType.MONTH:
        first = anchor.replace(day=1)
        last = anchor.replace(day=monthrange(anchor.year, anchor.month)[1])
        start = week_start(first, context.week_starts_on)
        return start, week_start(last, context.week_starts_on) + timedelta(days=6)
    if view is ViewType.WEEK:
        start = week_start(anchor, context.week_starts_on)
        return start, start + timedelta(days=6)
    if view is ViewType.DAY:
        return anchor, anchor
    return anchor, anchor + timedelta(days=context.list_days - 1)


def events_for_day(store: EventStore, day: date, tz: Optional[tzinfo] = None) -> List[Event]:
    start, end = day_window(day, tz)
    return store.get_events_in_range(start, end)


def _day_entry(store: EventStore, day: date, context: ViewContext) -> Dict[str, Any]:
    return {
        "date": day,
        "day_of_month": day.day,
        "day_name": day_name[day.weekday()],
        "is_today": day == context.today,
        "events": events_for_day(store, day, context.tz),
    }


def build_month_view(store: EventStore, context: ViewContext) -> Dict[str, Any]:
    start, end = visible_range(ViewType.MONTH, context)
    weeks: list[Dict[str, Any]] = []
    days: list[Dict[str, Any]] = []
    for day in _date_range(start, end):
        entry = _day_entry(store, day, context)
        entry["is_current_month"] = day.month == context.anchor.month and day.year == context.anchor.year
        days.append(entry)
        if len(days) == 7:
            weeks.append({"start": days[0]["date"], "days": days})
            days = []
    return {
        "view": ViewType.MONTH.value,
        "year": context.anchor.year,
        "month": context.anchor.month,
        "month_name": month_name[context.anchor.month],
        "start": start,
        "end": end,
        "weeks": weeks,
    }


def build_week_view(store: EventStore, context: ViewContext) -> Dict[str, Any]:
    start, end = visible_range(ViewType.WEEK, context)
    monday = start + timedelta(days=-start.weekday() % 7)
    iso_year, week_number, _ = monday.isocalendar()
    return {
        "view": ViewType.WEEK.value,
        "year": iso_year,
        "week_number": week_number,
        "start": start,
        "end": end,
        "days": [_day_entry(store, day, context) for day in _date_range(start, end)],
    }


def build_day_view(store: EventStore, context: ViewContext) -> Dict[str, Any]:
    day = context.anchor
    events = events_for_day(store, day, context.tz)
    all_day = [event for event in events if event.all_day]
    timed = [event for event in events if not event.all_day]
    hours = context.business_hours.hours if context.day_view_business_hours_only else range(24)
    slots = [
        {
            "hour": hour,
            "time": f"{hour:02d}:00",
            "events": [event for event in timed if event.start.date() == day and event.start.hour == hour],
        }
        for hour in hours
    ]
    return {
        "view": ViewType.DAY.value,
        "date": day,
        "day_name": day_name[day.weekday()],
        "is_today": day == context.today,
        "business_hours": context.business_hours.to_dict(),
        "all_day_events": all_day,
        "timed_events": timed,
        "hours": slots,
    }


def build_list_view(store: EventStore, context: ViewContext) -> Dict[str, Any]:
    start, end = visible_range(ViewType.LIST, context)
    days = []
    for day in _date_range(start, end):
        entry = _day_entry(store, day, context)
        if entry["events"]:
            days.append(entry)
    return {
        "view": ViewType.LIST.value,
        "start": start,
        "end": end,
        "total_events": sum(len(entry["events"]) for entry in days),
        "days": days,
    }


BUILDERS = {
    ViewType.MONTH: build_month_view,
    ViewType.WEEK: build_week_view,
    ViewType.DAY: build_day_view,
    ViewType.LIST: build_list_view,
}


def build_view_data(view: ViewType, store: EventStore, context: ViewContext) -> Dict[str, Any]:
    return BUILDERS[ViewType(view)](store, context)
